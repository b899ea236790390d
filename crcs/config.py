"""
Settings Module
===============

Pydantic-based configuration loaded from ``CRCS_*`` environment
variables and an optional ``.env`` file.

Version: 1.0.0
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .mimc import MiMC
from .signing import SignatureAlgorithm, SignatureScheme, get_scheme


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class MiMCSettings(BaseSettings):
    """
    Commitment hash parameters.

    Must match the round function compiled into the attribute circuit;
    the defaults reproduce  R(x, key) = (x + key)^7 + x.
    """

    model_config = SettingsConfigDict(env_prefix="CRCS_MIMC_")

    exponent: int = 7
    rounds: int = Field(default=1, ge=1)
    constants_seed: str = "CRCS/v1/mimc/constants"

    def build(self) -> MiMC:
        return MiMC(
            exponent=self.exponent,
            rounds=self.rounds,
            constants_seed=self.constants_seed.encode("utf-8"),
        )


class Settings(BaseSettings):
    """
    Issuer settings.

    Use ``get_settings()`` for the cached instance.
    """

    model_config = SettingsConfigDict(
        env_prefix="CRCS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Environment = Environment.DEVELOPMENT
    log_level: LogLevel = LogLevel.WARNING
    json_logs: bool = False

    signature_algorithm: SignatureAlgorithm = SignatureAlgorithm.ED25519
    mimc: MiMCSettings = Field(default_factory=MiMCSettings)

    # CLI defaults
    credential_path: Path = Path("credential.json")
    session_path: Path = Path("session.json")
    min_age: int = Field(default=18, ge=0)
    min_income: int = Field(default=500_000, ge=0)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v):
        """Accept log levels in any case."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @property
    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING

    def signature_scheme(self) -> SignatureScheme:
        return get_scheme(self.signature_algorithm)

    def commitment_hash(self) -> MiMC:
        return self.mimc.build()


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
