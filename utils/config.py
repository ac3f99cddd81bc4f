"""Configuration management for WordleSync."""

import json
import logging
import os
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

log = logging.getLogger("wordlesync.config")


class AppSettings(BaseModel):
    """Application settings with validation."""

    # Word list and dictionary
    word_list_path: str = Field(
        default="", description="Custom word list file (empty = bundled list)"
    )
    dictionary_api_url: str = Field(
        default="https://api.dictionaryapi.dev/api/v2/entries/en",
        description="Dictionary entries endpoint",
    )
    dictionary_timeout_sec: float = Field(
        default=5.0, gt=0, le=60, description="Dictionary request timeout (sec)"
    )
    dictionary_enabled: bool = Field(
        default=True, description="Validate guesses against the online dictionary"
    )

    # Remote store
    remote_sync_enabled: bool = Field(
        default=False, description="Save games to the remote PostgreSQL store"
    )
    postgres_host: str = Field(default="", description="PostgreSQL host")
    postgres_port: int = Field(default=5432, ge=1, le=65535, description="PostgreSQL port")
    postgres_database: str = Field(default="wordlesync", description="PostgreSQL database")
    postgres_user: str = Field(default="", description="PostgreSQL user")
    postgres_password: str = Field(default="", description="PostgreSQL password")
    postgres_sslmode: str = Field(default="require", description="PostgreSQL SSL mode")

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    @field_validator("postgres_sslmode")
    @classmethod
    def validate_sslmode(cls, v):
        allowed = ("disable", "allow", "prefer", "require", "verify-ca", "verify-full")
        if v not in allowed:
            raise ValueError(f"postgres_sslmode must be one of {', '.join(allowed)}")
        return v

    @field_validator("dictionary_api_url")
    @classmethod
    def validate_api_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError("dictionary_api_url must be an http(s) URL")
        return v


# WORDLESYNC_POSTGRES_PASSWORD etc. override the stored value of a typed setting
ENV_PREFIX = "WORDLESYNC_"


class Config:
    """Settings kept in the settings table of the game database.

    Keys declared on AppSettings are validated on write and come back with
    their declared type; other keys (the current user identity) are stored
    as text and parsed on read.
    """

    def __init__(self, db_path: Path):
        """Initialize config with database connection.

        Args:
            db_path: Path to SQLite database
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_settings_table()
        self._ensure_defaults()

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path, timeout=30.0)

    def _init_settings_table(self) -> None:
        with closing(self._get_connection()) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()

    def _ensure_defaults(self) -> None:
        """Insert defaults for typed settings not stored yet."""
        defaults = AppSettings().model_dump()
        with closing(self._get_connection()) as conn:
            conn.executemany(
                "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?)",
                [(key, self._serialize_value(value)) for key, value in defaults.items()],
            )
            conn.commit()

    def _serialize_value(self, value: Any) -> str:
        if isinstance(value, bool):
            return "True" if value else "False"
        if isinstance(value, (list, dict)):
            return json.dumps(value)
        return str(value)

    def _simple_parse(self, value: str) -> Any:
        """Parse untyped text: JSON, int, float, bool words, else the string."""
        if value.startswith(("[", "{")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        for cast in (int, float):
            try:
                return cast(value)
            except ValueError:
                pass

        if value.lower() in ("true", "yes", "on"):
            return True
        if value.lower() in ("false", "no", "off"):
            return False
        return value

    def _read_raw(self, key: str) -> str | None:
        env_value = os.environ.get(ENV_PREFIX + key.upper())
        if env_value is not None and key in AppSettings.model_fields:
            return env_value

        with closing(self._get_connection()) as conn:
            row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """Get configuration value.

        Args:
            key: Setting key
            default: Default value if not found

        Returns:
            Setting value
        """
        raw_value = self._read_raw(key)

        if raw_value is not None:
            # Typed settings are re-validated so "5432" comes back as an int
            # and a numeric-looking password stays a string
            if key in AppSettings.model_fields:
                try:
                    return getattr(AppSettings(**{key: raw_value}), key)
                except ValueError:
                    log.warning(f"Ignoring invalid value for setting {key}")
                    return getattr(AppSettings(), key)
            return self._simple_parse(raw_value)

        if default is not None:
            return default
        if key in AppSettings.model_fields:
            return getattr(AppSettings(), key)
        return None

    def _get_number(self, key: str, default, cast):
        value = self.get(key, default)
        try:
            return cast(value)
        except (ValueError, TypeError):
            return default if default is not None else cast(0)

    def get_int(self, key: str, default: Optional[int] = None) -> int:
        return self._get_number(key, default, int)

    def get_float(self, key: str, default: Optional[float] = None) -> float:
        return self._get_number(key, default, float)

    def get_bool(self, key: str, default: Optional[bool] = None) -> bool:
        value = self.get(key, default)
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes", "on")
        return bool(value)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value with pydantic validation.

        Args:
            key: Setting key
            value: Setting value

        Raises:
            ValueError: If value fails validation
        """
        if key in AppSettings.model_fields:
            try:
                value = getattr(AppSettings(**{key: value}), key)
            except ValueError as e:
                raise ValueError(f"Invalid value for {key}: {e}")

        with closing(self._get_connection()) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
                (key, self._serialize_value(value)),
            )
            conn.commit()

    def delete(self, key: str) -> None:
        """Remove a setting (typed settings fall back to their defaults)."""
        with closing(self._get_connection()) as conn:
            conn.execute("DELETE FROM settings WHERE key = ?", (key,))
            conn.commit()

    def get_all(self) -> dict[str, Any]:
        """Get every stored setting, parsed (environment overrides not applied)."""
        with closing(self._get_connection()) as conn:
            rows = conn.execute("SELECT key, value FROM settings").fetchall()
        return {key: self._simple_parse(value) for key, value in rows}

    def settings(self) -> AppSettings:
        """Get all typed settings as a validated model."""
        return AppSettings(**{key: self.get(key) for key in AppSettings.model_fields})
