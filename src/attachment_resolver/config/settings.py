from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv
from platformdirs import user_cache_dir, user_config_dir, user_data_dir

APP_NAME = "AttachmentResolver"
ENV_PREFIX = "ATTACHMENT_RESOLVER_"
ENV_FILE_NAME = "settings.env"
DATABASE_NAME = "attachments.db"

DEFAULT_BASE_URL = "http://localhost/uploads"
DEFAULT_USER_AGENT = "attachment-resolver/1.0"
DEFAULT_FETCH_TIMEOUT = 30.0
DEFAULT_MAX_DOWNLOAD_BYTES = 20 * 1024 * 1024

DEFAULT_ALLOWED_MIME_TYPES: tuple[str, ...] = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/bmp",
    "image/tiff",
    "image/x-icon",
    "image/vnd.microsoft.icon",
)


def _config_dir() -> Path:
    path = Path(user_config_dir(APP_NAME, roaming=True))
    path.mkdir(parents=True, exist_ok=True)
    return path


def _cache_dir() -> Path:
    path = Path(user_cache_dir(APP_NAME))
    path.mkdir(parents=True, exist_ok=True)
    return path


def _data_dir() -> Path:
    path = Path(user_data_dir(APP_NAME))
    path.mkdir(parents=True, exist_ok=True)
    return path


def config_dir() -> Path:
    return _config_dir()


def cache_dir() -> Path:
    return _cache_dir()


def data_dir() -> Path:
    return _data_dir()


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
    """Locations and limits used when resolving and storing attachments.

    ``base_url`` is the public prefix under which files written to
    ``uploads_dir`` are served; canonical asset URLs are built from it.
    """

    uploads_dir: Path = field(default_factory=lambda: _data_dir() / "uploads")
    database_path: Path = field(default_factory=lambda: _data_dir() / DATABASE_NAME)
    base_url: str = DEFAULT_BASE_URL
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    max_download_bytes: int = DEFAULT_MAX_DOWNLOAD_BYTES
    user_agent: str = DEFAULT_USER_AGENT
    allowed_mime_types: list[str] = field(
        default_factory=lambda: list(DEFAULT_ALLOWED_MIME_TYPES)
    )
    fetch_auth_token: str | None = None

    @property
    def normalised_base_url(self) -> str:
        return self.base_url.rstrip("/")


class SettingsManager:
    """Load and persist settings with environment overrides."""

    def __init__(self, env_file: Path | None = None) -> None:
        self._env_file = _env_file_path(env_file)

    @property
    def env_file(self) -> Path:
        return self._env_file

    def load(self) -> Settings:
        """Load settings from environment, falling back to persisted file."""
        load_dotenv(self._env_file, override=False)

        settings = Settings()

        uploads_dir = self._get_env("UPLOADS_DIR")
        if uploads_dir:
            settings.uploads_dir = Path(uploads_dir).expanduser()
        database_path = self._get_env("DATABASE_PATH")
        if database_path:
            settings.database_path = Path(database_path).expanduser()
        base_url = self._get_env("BASE_URL")
        if base_url:
            settings.base_url = base_url
        user_agent = self._get_env("USER_AGENT")
        if user_agent:
            settings.user_agent = user_agent

        timeout = self._get_float("FETCH_TIMEOUT")
        if timeout is not None:
            settings.fetch_timeout = timeout
        max_bytes = self._get_int("MAX_DOWNLOAD_BYTES")
        if max_bytes is not None:
            settings.max_download_bytes = max_bytes

        mime_types = self._get_list("ALLOWED_MIME_TYPES")
        if mime_types:
            settings.allowed_mime_types = mime_types

        settings.fetch_auth_token = self._get_env("FETCH_AUTH_TOKEN")
        return settings

    def save(self, settings: Settings) -> None:
        """Persist configuration fields to the managed env file."""
        self._env_file.parent.mkdir(parents=True, exist_ok=True)
        content = [
            f"{ENV_PREFIX}UPLOADS_DIR={settings.uploads_dir}",
            f"{ENV_PREFIX}DATABASE_PATH={settings.database_path}",
            f"{ENV_PREFIX}BASE_URL={settings.base_url}",
            f"{ENV_PREFIX}FETCH_TIMEOUT={settings.fetch_timeout}",
            f"{ENV_PREFIX}MAX_DOWNLOAD_BYTES={settings.max_download_bytes}",
            f"{ENV_PREFIX}USER_AGENT={settings.user_agent}",
            f"{ENV_PREFIX}ALLOWED_MIME_TYPES={';'.join(settings.allowed_mime_types)}",
            f"{ENV_PREFIX}FETCH_AUTH_TOKEN={settings.fetch_auth_token or ''}",
        ]
        self._env_file.write_text("\n".join(content) + "\n", encoding="utf-8")

    def _get_env(self, name: str) -> str | None:
        return os.getenv(f"{ENV_PREFIX}{name}") or None

    def _get_float(self, name: str) -> float | None:
        raw = self._get_env(name)
        if raw is None:
            return None
        try:
            return float(raw)
        except ValueError:
            return None

    def _get_int(self, name: str) -> int | None:
        raw = self._get_env(name)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            return None

    def _get_list(self, name: str) -> list[str] | None:
        raw = self._get_env(name)
        if not raw:
            return None
        values = [value.strip() for value in raw.split(";") if value.strip()]
        return values or None


__all__ = [
    "DEFAULT_ALLOWED_MIME_TYPES",
    "Settings",
    "SettingsManager",
    "cache_dir",
    "config_dir",
    "data_dir",
    "log_dir",
]
