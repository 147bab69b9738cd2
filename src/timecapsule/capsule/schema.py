"""Pydantic models for sealed capsules."""

import base64
import binascii
import uuid
from datetime import datetime, timedelta
from pathlib import Path
from typing import Literal, Optional

from argon2.profiles import RFC_9106_LOW_MEMORY
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..utils import ensure_utc, utcnow
from .errors import MalformedRecordError

FORMAT_VERSION = 1
SUPPORTED_VERSIONS = {1}

SALT_LENGTH = 16
NONCE_LENGTH = 12  # 96-bit AES-GCM nonce
TAG_LENGTH = 16


def new_record_id() -> str:
    return str(uuid.uuid4())


class KdfParams(BaseModel):
    """Argon2id cost parameters used to derive a capsule key."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    algorithm: Literal["argon2id"] = "argon2id"
    time_cost: int = Field(default=RFC_9106_LOW_MEMORY.time_cost, ge=1)
    memory_cost: int = Field(default=RFC_9106_LOW_MEMORY.memory_cost, ge=8)  # KiB
    parallelism: int = Field(default=RFC_9106_LOW_MEMORY.parallelism, ge=1)

    @model_validator(mode="after")
    def memory_covers_lanes(self) -> "KdfParams":
        if self.memory_cost < 8 * self.parallelism:
            raise ValueError("memory_cost must be at least 8 KiB per lane")
        return self


class SealedRecord(BaseModel):
    """A time-locked, password-encrypted capsule as persisted on disk.

    Byte fields are base64 in JSON, timestamps are ISO-8601 UTC. Instances
    are frozen: ``unlock_at`` cannot change after sealing.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    version: int = FORMAT_VERSION
    id: str = Field(default_factory=new_record_id, min_length=1)
    label: Optional[str] = None
    unlock_at: datetime
    created_at: datetime = Field(default_factory=utcnow)
    kdf: KdfParams = Field(default_factory=KdfParams)
    salt: bytes
    nonce: bytes
    ciphertext: bytes

    @field_validator("version")
    @classmethod
    def known_version(cls, v: int) -> int:
        if v not in SUPPORTED_VERSIONS:
            raise ValueError(f"unsupported record version {v}")
        return v

    @field_validator("unlock_at", "created_at")
    @classmethod
    def as_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_validator("salt", "nonce", "ciphertext", mode="before")
    @classmethod
    def decode_base64(cls, v):
        if isinstance(v, str):
            try:
                return base64.b64decode(v, validate=True)
            except binascii.Error as e:
                raise ValueError(f"invalid base64: {e}") from e
        return v

    @field_validator("salt")
    @classmethod
    def salt_length(cls, v: bytes) -> bytes:
        if len(v) < SALT_LENGTH:
            raise ValueError(f"salt must be at least {SALT_LENGTH} bytes")
        return v

    @field_validator("nonce")
    @classmethod
    def nonce_length(cls, v: bytes) -> bytes:
        if len(v) != NONCE_LENGTH:
            raise ValueError(f"nonce must be {NONCE_LENGTH} bytes")
        return v

    @field_validator("ciphertext")
    @classmethod
    def ciphertext_has_tag(cls, v: bytes) -> bytes:
        if len(v) < TAG_LENGTH:
            raise ValueError("ciphertext is shorter than the authentication tag")
        return v

    @field_serializer("salt", "nonce", "ciphertext", when_used="json")
    def encode_base64(self, v: bytes) -> str:
        return base64.b64encode(v).decode("ascii")

    def to_json(self) -> str:
        """Serialize as pretty-printed camelCase JSON."""
        return self.model_dump_json(by_alias=True, indent=2)

    @classmethod
    def from_json(cls, data: str | bytes) -> "SealedRecord":
        """Parse a record, raising MalformedRecordError on any invalid input."""
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise MalformedRecordError(f"Invalid capsule record: {e}") from e

    def is_ready(self, now: datetime | None = None) -> bool:
        return ensure_utc(now or utcnow()) >= self.unlock_at


class CapsuleSummary(BaseModel):
    """Listing entry for a stored capsule (no key material)."""

    id: str
    label: Optional[str] = None
    unlock_at: datetime
    created_at: datetime
    path: Path

    @classmethod
    def from_record(cls, record: SealedRecord, path: Path) -> "CapsuleSummary":
        return cls(
            id=record.id,
            label=record.label,
            unlock_at=record.unlock_at,
            created_at=record.created_at,
            path=path,
        )

    def is_ready(self, now: datetime | None = None) -> bool:
        return ensure_utc(now or utcnow()) >= self.unlock_at

    def remaining(self, now: datetime | None = None) -> timedelta:
        return max(self.unlock_at - ensure_utc(now or utcnow()), timedelta(0))
