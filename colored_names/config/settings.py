"""
Centralized process settings for colored player names.

This module provides type-safe access to the environment variables that
locate the palette document and tune the engine. Settings are loaded once
and exposed via a singleton pattern; the palette itself lives in the YAML
document handled by :mod:`colored_names.config.palette`.

Usage:
    from colored_names.config.settings import get_settings

    settings = get_settings()
    path = settings.storage.config_path
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from colored_names.log_config import get_logger


# Initialize module-level logger
_logger = get_logger("config.settings")

# Minecraft caps team names at 16 characters; the longest color label is
# "light_purple" (12), which leaves 4 characters for the prefix.
MAX_TEAM_PREFIX_LENGTH = 4


class StorageSettings(BaseModel):
    """
    Location of the palette configuration document.
    """

    config_path: Path = Field(
        default=Path("config.yml"),
        description="Path of the YAML palette document"
    )


class TeamSettings(BaseModel):
    """
    External team naming.

    Team labels are derived from the prefix and the color name so repeated
    reloads produce stable identifiers.
    """

    team_prefix: str = Field(
        default="cpn_",
        description="Prefix prepended to every team label"
    )

    @field_validator("team_prefix")
    @classmethod
    def validate_team_prefix(cls, v: str) -> str:
        """
        Validate the team prefix is usable as part of a team name.

        :param v: The prefix to validate
        :return: The validated prefix
        :raises ValueError: If the prefix is blank, too long or has whitespace
        """
        if not v or not v.strip():
            raise ValueError("Team prefix must not be blank")
        if any(ch.isspace() for ch in v):
            raise ValueError(f"Team prefix must not contain whitespace: {v!r}")
        if len(v) > MAX_TEAM_PREFIX_LENGTH:
            raise ValueError(
                f"Team prefix must be at most {MAX_TEAM_PREFIX_LENGTH} characters, got {len(v)}"
            )
        return v


class EngineSettings(BaseModel):
    """
    Engine tuning.
    """

    random_seed: Optional[int] = Field(
        default=None,
        description="Seed for color selection; unseeded when omitted"
    )


class LoggingSettings(BaseModel):
    verbose_logging: bool = Field(
        default=False,
        description="Emit DEBUG level logs"
    )


class Settings(BaseModel):
    """
    Main process settings combining all configuration domains.

    :ivar storage: Palette document location
    :ivar teams: External team naming
    :ivar engine: Engine tuning
    :ivar logging: Logging verbosity
    """

    storage: StorageSettings = Field(default_factory=StorageSettings)
    teams: TeamSettings = Field(default_factory=TeamSettings)
    engine: EngineSettings = Field(default_factory=EngineSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Global singleton instance
_settings_instance: Optional[Settings] = None


def _load_env_bool(key: str, default: bool = False) -> bool:
    """
    Load boolean value from environment variable.

    :param key: Environment variable key
    :param default: Default value if not set
    :return: Boolean value
    """
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes")


def _load_env_optional_int(key: str) -> Optional[int]:
    """
    Load an optional integer value from environment variable.

    :param key: Environment variable key
    :return: Integer value, or None if unset or invalid
    """
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError as e:
        _logger.warning(f"Invalid integer for {key}, ignoring: {e}")
        return None


def _create_settings(env_path: Optional[Path] = None) -> Settings:
    """
    Create and initialize Settings instance from environment.

    Loads environment variables from the .env file in the working directory
    (or ``env_path``) and constructs the settings hierarchy.

    :param env_path: Explicit .env location
    :return: Initialized Settings instance
    :raises ValueError: If settings are invalid
    """
    try:
        env_path = env_path or Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(dotenv_path=env_path, override=False)
            _logger.debug(f"Loaded environment from {env_path}")

        settings = Settings(
            storage=StorageSettings(
                config_path=Path(os.getenv("CPN_CONFIG_PATH", "config.yml")),
            ),
            teams=TeamSettings(
                team_prefix=os.getenv("CPN_TEAM_PREFIX", "cpn_"),
            ),
            engine=EngineSettings(
                random_seed=_load_env_optional_int("CPN_RANDOM_SEED"),
            ),
            logging=LoggingSettings(
                verbose_logging=_load_env_bool("VERBOSE_LOGGING", False),
            ),
        )

        _logger.debug("Settings loaded successfully")
        return settings

    except Exception as e:
        _logger.error(f"Failed to load settings: {e}")
        raise


def get_settings() -> Settings:
    """
    Get or create the settings singleton instance.

    :return: Global Settings instance
    :raises ValueError: If settings cannot be loaded
    """
    global _settings_instance

    if _settings_instance is None:
        _settings_instance = _create_settings()

    return _settings_instance


def peek_settings() -> Optional[Settings]:
    """Return the settings singleton without creating it."""
    return _settings_instance


def reset_settings() -> None:
    """
    Reset the settings singleton (primarily for testing).

    Forces settings to be reloaded on next get_settings() call.
    """
    global _settings_instance
    _settings_instance = None
    _logger.debug("Settings instance reset")
