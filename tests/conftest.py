"""Shared pytest fixtures for Time Capsule tests."""

import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from timecapsule.capsule.codec import CapsuleCodec
from timecapsule.capsule.schema import KdfParams
from timecapsule.config import Settings

# Minimal Argon2id cost so the suite stays fast
FAST_KDF = KdfParams(time_cost=1, memory_cost=8, parallelism=1)

PAST = datetime(2020, 1, 1, tzinfo=timezone.utc)
FUTURE = datetime(2030, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch):
    """Keep the user's real config file and environment out of tests."""
    monkeypatch.setenv("TIMECAPSULE_CONFIG_FILE", str(tmp_path / "missing-config.yaml"))
    for var in (
        "TIMECAPSULE_STORAGE_DIR",
        "TIMECAPSULE_KDF_TIME_COST",
        "TIMECAPSULE_KDF_MEMORY_COST",
        "TIMECAPSULE_KDF_PARALLELISM",
        "TIMECAPSULE_MIN_PASSWORD_LENGTH",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def fast_kdf() -> KdfParams:
    """Cheap Argon2id parameters."""
    return FAST_KDF


@pytest.fixture
def past() -> datetime:
    """An unlock time that has already passed."""
    return PAST


@pytest.fixture
def future() -> datetime:
    """An unlock time in 2030."""
    return FUTURE


@pytest.fixture
def storage_dir(tmp_path: Path) -> Path:
    """Storage directory for capsule records (not created up front)."""
    return tmp_path / "capsules"


@pytest.fixture
def settings(storage_dir: Path) -> Settings:
    """Create settings with temporary storage and a cheap KDF."""
    return Settings(
        storage_dir=storage_dir,
        kdf_time_cost=FAST_KDF.time_cost,
        kdf_memory_cost=FAST_KDF.memory_cost,
        kdf_parallelism=FAST_KDF.parallelism,
    )


@pytest.fixture
def codec() -> CapsuleCodec:
    """Create a codec with a cheap KDF."""
    return CapsuleCodec(FAST_KDF)


@pytest.fixture
def sealed(codec):
    """A capsule sealed for 2030-01-01 with password 'pw123'."""
    return codec.seal(b"hello world", b"pw123", FUTURE, label="test")


@pytest.fixture
def ready(codec):
    """A capsule whose unlock time has already passed."""
    return codec.seal(b"already open", b"pw123", PAST, label="old")


@pytest.fixture
def cli_env(storage_dir: Path) -> dict:
    """Environment for CliRunner invocations."""
    return {
        "TIMECAPSULE_STORAGE_DIR": str(storage_dir),
        "TIMECAPSULE_KDF_TIME_COST": str(FAST_KDF.time_cost),
        "TIMECAPSULE_KDF_MEMORY_COST": str(FAST_KDF.memory_cost),
        "TIMECAPSULE_KDF_PARALLELISM": str(FAST_KDF.parallelism),
    }


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handler changes made by setup_colored_logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
