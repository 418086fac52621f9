"""Configuration loading for TradeJournal.

Settings live in ``~/.config/tradejournal/config.toml``. The location can
be overridden with the ``TRADEJOURNAL_CONFIG`` environment variable. A
missing file means all defaults.
"""

import os
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field, field_validator

from tradejournal.analytics.buckets import resolve_timezone

CONFIG_DIR = Path.home() / ".config" / "tradejournal"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = CONFIG_DIR / "journal.db"


class JournalConfig(BaseModel):
    """Resolved settings."""

    user: str = Field(default="default", min_length=1, description="Identity used for ownership")
    db_path: Path = Field(default=DEFAULT_DB_PATH, description="SQLite database file")
    currency: str = Field(default="USD", description="Default currency for new portfolios")
    timezone: str = Field(default="UTC", description="Reference zone for time bucketing")
    log_level: str = Field(default="WARNING", description="Logging level")

    model_config = {"frozen": True}

    @field_validator("db_path", mode="before")
    @classmethod
    def _expand_path(cls, value):
        return Path(value).expanduser()

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            resolve_timezone(value)
        except (KeyError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level


def config_path() -> Path:
    """Path of the configuration file in effect."""
    override = os.environ.get("TRADEJOURNAL_CONFIG")
    return Path(override).expanduser() if override else DEFAULT_CONFIG_PATH


def load_config(path: Optional[Path] = None) -> JournalConfig:
    """Load settings from a TOML file.

    Args:
        path: File to read. Defaults to ``config_path()``.

    Returns:
        JournalConfig; defaults if the file does not exist.

    Raises:
        toml.TomlDecodeError: If the file is not valid TOML.
        pydantic.ValidationError: If a setting has an invalid value.
    """
    path = path or config_path()
    if not path.exists():
        return JournalConfig()

    raw = toml.load(path)
    journal = raw.get("journal", {})
    logging_section = raw.get("logging", {})

    values = {k: v for k, v in journal.items() if k in JournalConfig.model_fields}
    if "level" in logging_section:
        values["log_level"] = logging_section["level"]
    return JournalConfig(**values)


def write_template(path: Optional[Path] = None) -> Path:
    """Write a configuration file with the default settings."""
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    defaults = JournalConfig()
    template = {
        "journal": {
            "user": defaults.user,
            "db_path": str(defaults.db_path),
            "currency": defaults.currency,
            "timezone": defaults.timezone,
        },
        "logging": {
            "level": defaults.log_level,
        },
    }
    with open(path, "w") as f:
        toml.dump(template, f)
    return path
