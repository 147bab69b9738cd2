"""Configuration management for Time Capsule."""

import os
from pathlib import Path

from argon2.profiles import RFC_9106_LOW_MEMORY
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict, YamlConfigSettingsSource

from .capsule.schema import KdfParams

CONFIG_FILE_ENV = "TIMECAPSULE_CONFIG_FILE"


def default_config_file() -> Path:
    """YAML config location, overridable through TIMECAPSULE_CONFIG_FILE."""
    override = os.environ.get(CONFIG_FILE_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".timecapsule" / "config.yaml"


class Settings(BaseSettings):
    """Application settings loaded from init args, environment, .env and config.yaml."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TIMECAPSULE_",
        extra="ignore",
    )

    storage_dir: Path = Field(default_factory=lambda: Path.home() / ".timecapsule")

    # Argon2id cost for newly sealed capsules
    kdf_time_cost: int = Field(default=RFC_9106_LOW_MEMORY.time_cost, ge=1)
    kdf_memory_cost: int = Field(default=RFC_9106_LOW_MEMORY.memory_cost, ge=8)
    kdf_parallelism: int = Field(default=RFC_9106_LOW_MEMORY.parallelism, ge=1)

    min_password_length: int = Field(default=1, ge=1)

    @field_validator("storage_dir")
    @classmethod
    def expand_home(cls, v: Path) -> Path:
        return v.expanduser()

    @model_validator(mode="after")
    def kdf_memory_covers_lanes(self) -> "Settings":
        if self.kdf_memory_cost < 8 * self.kdf_parallelism:
            raise ValueError("kdf_memory_cost must be at least 8 KiB per kdf_parallelism lane")
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=default_config_file()),
            file_secret_settings,
        )

    @property
    def kdf(self) -> KdfParams:
        return KdfParams(
            time_cost=self.kdf_time_cost,
            memory_cost=self.kdf_memory_cost,
            parallelism=self.kdf_parallelism,
        )


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
