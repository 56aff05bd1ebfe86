from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path

from dotenv import dotenv_values
from platformdirs import user_cache_dir, user_config_dir

from bios_manager.errors import ConfigurationMissingError

APP_NAME = "BiosManager"
ENV_PREFIX = "BIOS_MANAGER_"
ENV_FILE_NAME = "settings.env"

DEFAULT_NETWORK_LIBRARY = "DBMSSOCN"
DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _config_dir() -> Path:
    path = Path(user_config_dir(APP_NAME, roaming=True))
    path.mkdir(parents=True, exist_ok=True)
    return path


def _cache_dir() -> Path:
    path = Path(user_cache_dir(APP_NAME))
    path.mkdir(parents=True, exist_ok=True)
    return path


def cache_dir() -> Path:
    return _cache_dir()


def log_dir() -> Path:
    path = cache_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def _env_file_path(explicit: Path | None) -> Path:
    if explicit is not None:
        return explicit
    return _config_dir() / ENV_FILE_NAME


@dataclass(slots=True)
class Settings:
    """Connection details for the MDT database and Configuration Manager site.

    The catalog password is deliberately absent; it lives in the OS keyring
    (see :class:`bios_manager.auth.SecretStore`).
    """

    database_server: str | None = None
    database: str | None = None
    network_library: str | None = DEFAULT_NETWORK_LIBRARY
    sccm_server: str | None = None
    sccm_site_code: str | None = None
    odbc_driver: str = DEFAULT_ODBC_DRIVER
    database_url: str | None = None
    catalog_username: str | None = None
    catalog_verify_tls: bool = True

    @property
    def has_database(self) -> bool:
        if self.database_url:
            return True
        return bool(self.database_server and self.database and self.network_library)

    @property
    def has_catalog(self) -> bool:
        return bool(self.sccm_server and self.sccm_site_code)

    @property
    def is_configured(self) -> bool:
        """True when both the database and the site server are known."""
        return self.has_database and self.has_catalog

    def missing_fields(self) -> list[str]:
        missing: list[str] = []
        if not self.database_url:
            for name in ("database_server", "database", "network_library"):
                if not getattr(self, name):
                    missing.append(name)
        for name in ("sccm_server", "sccm_site_code"):
            if not getattr(self, name):
                missing.append(name)
        return missing

    def require(self) -> "Settings":
        """Return self, raising when mandatory fields were never persisted."""
        missing = self.missing_fields()
        if missing:
            raise ConfigurationMissingError(
                message="BIOS manager settings are incomplete: " + ", ".join(missing),
                missing=tuple(missing),
            )
        return self


class SettingsManager:
    """Load and persist settings with environment overrides."""

    def __init__(self, env_file: Path | None = None) -> None:
        self._env_file = _env_file_path(env_file)

    @property
    def env_file(self) -> Path:
        return self._env_file

    def load(self, *, environment: bool = True) -> Settings:
        """Load settings from the persisted file.

        With ``environment`` the process environment wins over the file;
        callers about to :meth:`save` pass ``False`` so overrides stay transient.
        """
        persisted: dict[str, str | None] = {}
        if self._env_file.exists():
            persisted = dict(dotenv_values(self._env_file))

        settings = Settings()
        for item in fields(Settings):
            raw = self._lookup(item.name, persisted, environment=environment)
            if raw is None:
                continue
            if item.name == "catalog_verify_tls":
                settings.catalog_verify_tls = raw.strip().lower() in _TRUE_VALUES
            else:
                setattr(settings, item.name, raw)
        return settings

    def save(self, settings: Settings) -> None:
        """Persist all settings fields to the managed env file."""
        self._env_file.parent.mkdir(parents=True, exist_ok=True)
        content: list[str] = []
        for item in fields(Settings):
            value = getattr(settings, item.name)
            if isinstance(value, bool):
                value = "true" if value else "false"
            content.append(f"{ENV_PREFIX}{item.name.upper()}={value or ''}")
        self._env_file.write_text("\n".join(content) + "\n", encoding="utf-8")

    def _lookup(
        self,
        name: str,
        persisted: dict[str, str | None],
        *,
        environment: bool,
    ) -> str | None:
        key = f"{ENV_PREFIX}{name.upper()}"
        if environment and os.getenv(key):
            return os.getenv(key)
        return persisted.get(key) or None


__all__ = [
    "APP_NAME",
    "DEFAULT_NETWORK_LIBRARY",
    "DEFAULT_ODBC_DRIVER",
    "Settings",
    "SettingsManager",
    "cache_dir",
    "log_dir",
]
