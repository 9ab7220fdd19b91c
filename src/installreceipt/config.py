"""Configuration for installreceipt.

Settings are read once per process from the environment (and an optional
``.env`` file in the working directory).
"""

from __future__ import annotations

import logging
import os
import platform
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from installreceipt.codes import DEFAULT_COMPILER

_config_logger = logging.getLogger(__name__)


DEFAULT_MANAGER_VERSION = "4.4.0"


class LoggingSettings(BaseModel):
    level: str = Field(default="WARNING", description="Python logging level name")
    file: str | None = Field(default=None, description="Optional log file path")


class ReceiptSettings(BaseModel):
    manager_version: str = Field(
        default=DEFAULT_MANAGER_VERSION,
        description="Version of the package manager recorded in new receipts",
    )
    default_compiler: str = Field(
        default=DEFAULT_COMPILER,
        description="Compiler assumed when a receipt does not record one",
    )
    cpu_arch: str | None = Field(
        default_factory=lambda: platform.machine() or None,
        description="CPU architecture recorded in new receipts",
    )

    @field_validator("default_compiler")
    @classmethod
    def _validate_default_compiler(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("default_compiler must not be empty")
        return value


class Settings(BaseModel):
    receipt: ReceiptSettings = Field(default_factory=ReceiptSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


ENV_KEYS = {
    "manager_version": "INSTALLRECEIPT_MANAGER_VERSION",
    "default_compiler": "INSTALLRECEIPT_DEFAULT_COMPILER",
    "cpu_arch": "INSTALLRECEIPT_CPU_ARCH",
    "log_level": "LOG_LEVEL",
    "log_file": "LOG_FILE",
}


def _env_str(key: str, default: str | None) -> str | None:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def load_settings() -> Settings:
    """Load configuration and cache the result."""

    return _load_settings_cached()


@lru_cache(maxsize=1)
def _load_settings_cached() -> Settings:
    load_dotenv()
    defaults = ReceiptSettings()

    settings_data: dict[str, object] = {
        "receipt": {
            "manager_version": _env_str(ENV_KEYS["manager_version"], defaults.manager_version),
            "default_compiler": _env_str(ENV_KEYS["default_compiler"], defaults.default_compiler),
            "cpu_arch": _env_str(ENV_KEYS["cpu_arch"], defaults.cpu_arch),
        },
        "logging": {
            "level": _env_str(ENV_KEYS["log_level"], LoggingSettings().level),
            "file": _env_str(ENV_KEYS["log_file"], None),
        },
    }

    try:
        return Settings.model_validate(settings_data)
    except ValidationError as exc:
        _config_logger.warning("Invalid installreceipt settings, using defaults: %s", exc)
        return Settings()
