"""
config.py — App Configuration
==============================
Validated settings, read from ``SORTVIZ_*`` environment variables or a
``.env`` file, and handed to Flask as an upper-case mapping:

    SORTVIZ_DEFAULT_DELAY_MS=50 SORTVIZ_RECORD_COUNT=200 python main.py

    app.config.from_mapping(Settings().to_flask())

A value that does not parse (``SORTVIZ_RECORD_COUNT=fifty``) or breaks a
bound raises pydantic's ValidationError naming the field, at startup.
"""

import logging
import secrets
from typing import Any, Dict, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from algorithms import get_algorithm


DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class Settings(BaseSettings):
    """
    Fields
    ──────
    default_delay_ms   : Tick delay a new session starts with
    max_delay_ms       : Upper end of the delay slider
    default_algorithm  : Registry key preselected in the UI
    max_ticks_per_poll : Cap on ticks fired by one timer pump
    validate_steps     : Check every snapshot for lost / duplicated records
    record_count       : Size of the initial random list
    max_records        : Largest list a reset or add may produce
    max_value          : Random values are drawn from [0, max_value]
    seed               : RNG seed for the initial list and shuffles
    """

    model_config = SettingsConfigDict(
        env_prefix="SORTVIZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    secret_key: str = Field(default_factory=lambda: secrets.token_hex(32))
    testing:    bool = False

    # ── Playback ─────────────────────────────────────────────────
    default_delay_ms:   int  = Field(default=100, ge=0)
    max_delay_ms:       int  = Field(default=1000, ge=0)
    default_algorithm:  str  = "selectionSort"
    max_ticks_per_poll: int  = Field(default=1000, ge=1)
    validate_steps:     bool = True

    # ── Initial data ─────────────────────────────────────────────
    record_count: int           = Field(default=50, ge=0)
    max_records:  int           = Field(default=1000, ge=1)
    max_value:    int           = Field(default=1000, ge=1)
    seed:         Optional[int] = None

    # ── Logging ──────────────────────────────────────────────────
    log_level:  str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT

    @field_validator("default_algorithm")
    @classmethod
    def _known_algorithm(cls, value: str) -> str:
        if get_algorithm(value) is None:
            raise ValueError(f"unknown algorithm {value!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @model_validator(mode="after")
    def _within_bounds(self) -> "Settings":
        if self.record_count > self.max_records:
            raise ValueError(f"record_count {self.record_count} exceeds max_records {self.max_records}")
        if self.default_delay_ms > self.max_delay_ms:
            raise ValueError(f"default_delay_ms {self.default_delay_ms} exceeds max_delay_ms {self.max_delay_ms}")
        return self

    def to_flask(self) -> Dict[str, Any]:
        return {name.upper(): value for name, value in self.model_dump().items()}


class TestingSettings(Settings):
    """Fixed, seeded settings for the test suite; ignores SORTVIZ_* variables."""

    model_config = SettingsConfigDict(env_prefix="SORTVIZ_TEST_", env_file=None, extra="ignore")

    secret_key:   str           = "test"
    testing:      bool          = True
    record_count: int           = 8
    seed:         Optional[int] = 1234
    log_level:    str           = "DEBUG"


def configure_logging(level: str = "INFO", fmt: str = DEFAULT_LOG_FORMAT) -> None:
    """Install a root handler once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=fmt)
    root.setLevel(level.upper())
