"""Configuration system for hook wrapper."""

import os
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from hook_wrapper.core.constants import DEFAULT_FILE_PREFIX, DEFAULT_POSIX_SHELL
from hook_wrapper.core.errors import ConfigurationError
from hook_wrapper.core.path_utils import normalize_user_path
from hook_wrapper.core.platform import Platform, current_platform


class Settings(BaseSettings):
    """Hook Wrapper Configuration."""

    # Temporary files
    temp_dir: Path | None = Field(
        default=None,
        description="Directory for wrapper scripts and environment dumps (system temp dir if unset)",
    )
    file_prefix: str = Field(
        default=DEFAULT_FILE_PREFIX,
        min_length=1,
        description="Prefix for temporary file names",
    )
    keep_temp_files: bool = Field(
        default=False,
        description="Keep wrapper scripts and dumps after close (debugging only)",
    )

    # Scripts
    posix_shell: str = Field(
        default=DEFAULT_POSIX_SHELL,
        description="Interpreter used in the shebang line of POSIX wrapper scripts",
    )

    # Execution
    hook_timeout_seconds: float | None = Field(
        default=None,
        gt=0.0,
        description="Default timeout for running a hook (no timeout if unset)",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    model_config = {
        "env_prefix": "HOOK_WRAPPER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @field_validator("file_prefix")
    @classmethod
    def _check_file_prefix(cls, value: str) -> str:
        if "/" in value or "\\" in value:
            raise ValueError("file_prefix must not contain path separators")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level


# Settings singleton with dependency injection support
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the settings instance (lazy-loaded singleton).

    Returns:
        The Settings instance.

    Example:
        from hook_wrapper.config import get_settings
        settings = get_settings()
        print(settings.temp_dir)
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def override_settings(new_settings: Settings) -> None:
    """Override the settings instance (for testing).

    Args:
        new_settings: The new Settings instance to use.
    """
    global _settings
    _settings = new_settings


def reset_settings() -> None:
    """Reset settings to None (forces reload on next get_settings call)."""
    global _settings
    _settings = None


def settings_summary(settings: Settings) -> dict[str, Any]:
    """Settings as a dict suitable for debug logging."""
    return settings.model_dump(mode="json")


def validate_startup(settings: Settings) -> list[str]:
    """Check settings before running any hook.

    Args:
        settings: Settings to check.

    Returns:
        Warning messages for settings that work but are probably unintended.

    Raises:
        ConfigurationError: If a hook could not be run with these settings.
    """
    warnings: list[str] = []

    if settings.temp_dir is not None:
        temp_dir = normalize_user_path(settings.temp_dir)
        if not temp_dir.exists():
            raise ConfigurationError(f"temp_dir does not exist: {temp_dir.name}")
        if not temp_dir.is_dir():
            raise ConfigurationError(f"temp_dir is not a directory: {temp_dir.name}")

    if current_platform() is Platform.POSIX and not os.path.isfile(settings.posix_shell):
        warnings.append(f"posix_shell not found: {settings.posix_shell}")

    if settings.keep_temp_files:
        warnings.append("keep_temp_files is on; wrapper scripts and dumps will not be removed")

    return warnings
