"""Ambient settings for the AWS clients used by credential sources."""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

_config_logger = logging.getLogger(__name__)


class STSClientSettings(BaseModel):
    connect_timeout: int = Field(default=5, ge=1, le=120)
    read_timeout: int = Field(default=15, ge=1, le=300)
    max_attempts: int = Field(default=2, ge=1, le=10)


class CredentialSettings(BaseModel):
    refresh_buffer_seconds: int = Field(default=300, ge=0, le=3600)
    role_duration_seconds: int = Field(default=3600, ge=900, le=43200)


class Settings(BaseModel):
    sts: STSClientSettings = Field(default_factory=STSClientSettings)
    credentials: CredentialSettings = Field(default_factory=CredentialSettings)


ENV_KEYS = {
    "sts_connect_timeout": "MSK_IAM_STS_CONNECT_TIMEOUT",
    "sts_read_timeout": "MSK_IAM_STS_READ_TIMEOUT",
    "sts_max_attempts": "MSK_IAM_STS_MAX_ATTEMPTS",
    "refresh_buffer_seconds": "MSK_IAM_CREDENTIAL_REFRESH_BUFFER_SECONDS",
    "role_duration_seconds": "MSK_IAM_ROLE_DURATION_SECONDS",
}


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        _config_logger.warning(
            "Invalid integer value for %s: %r, using default %d", key, value, default
        )
        return default


def load_settings() -> Settings:
    """Load configuration and cache the result."""

    return _load_settings_cached()


@lru_cache(maxsize=1)
def _load_settings_cached() -> Settings:
    load_dotenv()

    settings_data: dict[str, object] = {
        "sts": {
            "connect_timeout": _env_int(
                ENV_KEYS["sts_connect_timeout"],
                STSClientSettings().connect_timeout,
            ),
            "read_timeout": _env_int(
                ENV_KEYS["sts_read_timeout"],
                STSClientSettings().read_timeout,
            ),
            "max_attempts": _env_int(
                ENV_KEYS["sts_max_attempts"],
                STSClientSettings().max_attempts,
            ),
        },
        "credentials": {
            "refresh_buffer_seconds": _env_int(
                ENV_KEYS["refresh_buffer_seconds"],
                CredentialSettings().refresh_buffer_seconds,
            ),
            "role_duration_seconds": _env_int(
                ENV_KEYS["role_duration_seconds"],
                CredentialSettings().role_duration_seconds,
            ),
        },
    }

    try:
        return Settings.model_validate(settings_data)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid configuration: {exc}") from exc
