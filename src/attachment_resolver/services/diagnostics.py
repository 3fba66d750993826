from __future__ import annotations

import json
import platform
import time
from datetime import UTC, datetime
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Dict

from attachment_resolver.config.settings import Settings
from attachment_resolver.data import AssetKind, AssetRepository, DatabaseManager
from attachment_resolver.data.storage import UploadStore
from attachment_resolver.utils import get_logger, log_file_path, obfuscate_secret

from .index import AttachmentIndex


logger = get_logger(__name__)

PACKAGE_NAME = "attachment-resolver"
REPORTED_LIBRARIES: tuple[str, ...] = ("httpx", "sqlmodel", "SQLAlchemy", "pydantic")
SECRET_SETTINGS: frozenset[str] = frozenset({"fetch_auth_token"})


class DiagnosticsService:
    """Collect system information for support requests and manage the index."""

    def __init__(
        self,
        settings: Settings,
        db: DatabaseManager,
        repository: AssetRepository,
        uploads: UploadStore,
        index: AttachmentIndex,
    ) -> None:
        self._settings = settings
        self._db = db
        self._repository = repository
        self._uploads = uploads
        self._index = index
        self._index_reset_at: datetime | None = None

    # ------------------------------------------------------------ Index ops

    def reset_index(self) -> None:
        self._index.reset()
        self._index_reset_at = datetime.now(UTC)
        logger.info("Attachment index reset on request")

    # ---------------------------------------------------------- System info

    def system_info(self) -> Dict[str, Any]:
        index_stats = self._index.stats()
        upload_stats = self._uploads.stats()
        info: Dict[str, Any] = {
            "version": self._resolve_version(),
            "python version": platform.python_version(),
            "platform": platform.platform(),
            "libraries": [
                f"{name} version {self._library_version(name)}"
                for name in REPORTED_LIBRARIES
            ],
            "server timezone": time.strftime("%Z") or "unknown",
            "database path": str(self._db.path),
            "log file": str(log_file_path()),
            "uploads directory": str(self._uploads.base_dir),
            "settings": self._settings_snapshot(),
            "attachments": self._repository.count(kind=AssetKind.ATTACHMENT),
            "index state": index_stats.state.value,
            "indexed canonical urls": index_stats.canonical_urls,
            "indexed source urls": index_stats.source_urls,
            "index loads": index_stats.loads,
            "upload files": upload_stats.total_files,
            "upload bytes": upload_stats.total_bytes,
            "last upload": upload_stats.last_modified.isoformat()
            if upload_stats.last_modified
            else None,
        }
        if self._index_reset_at is not None:
            info["index reset"] = (
                "The attachment index was reset at "
                f"{self._index_reset_at.isoformat()}; it reloads on the next lookup."
            )
        return info

    def format_system_info(self) -> str:
        """Render system info as aligned ``key: value`` lines."""

        lines: list[str] = []
        for key, value in self.system_info().items():
            if isinstance(value, dict):
                lines.append(f"{key}:")
                for sub_key, sub_value in value.items():
                    lines.append(f"  {sub_key} = {self._format_scalar(sub_value)}")
            elif isinstance(value, (list, tuple)):
                lines.append(f"{key}:")
                if not value:
                    lines.append("  -")
                lines.extend(f"  - {item}" for item in value)
            else:
                lines.append(f"{key}: {self._format_scalar(value)}")
        return "\n".join(lines)

    def export_system_info(self, target: Path) -> Path:
        if target.is_dir():
            timestamp = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
            target = target / f"attachment-resolver-sysinfo-{timestamp}.json"
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = self.system_info()
        target.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        logger.info("Exported system info", destination=str(target))
        return target

    # ------------------------------------------------------------- Internals

    def _settings_snapshot(self) -> Dict[str, Any]:
        snapshot: Dict[str, Any] = {
            "uploads_dir": str(self._settings.uploads_dir),
            "database_path": str(self._settings.database_path),
            "base_url": self._settings.base_url,
            "fetch_timeout": self._settings.fetch_timeout,
            "max_download_bytes": self._settings.max_download_bytes,
            "user_agent": self._settings.user_agent,
            "allowed_mime_types": list(self._settings.allowed_mime_types),
            "fetch_auth_token": self._settings.fetch_auth_token,
        }
        for key in SECRET_SETTINGS:
            value = snapshot.get(key)
            if isinstance(value, str):
                snapshot[key] = obfuscate_secret(value)
        return snapshot

    @staticmethod
    def _format_scalar(value: Any) -> str:
        if value is None or value == "" or value == []:
            return "-"
        if isinstance(value, bool):
            return "yes" if value else "no"
        if isinstance(value, (list, tuple)):
            return ", ".join(str(item) for item in value)
        return str(value)

    @staticmethod
    def _library_version(name: str) -> str:
        try:
            return version(name)
        except PackageNotFoundError:
            return "unknown"

    @staticmethod
    def _resolve_version() -> str:
        try:
            return version(PACKAGE_NAME)
        except PackageNotFoundError:  # pragma: no cover - during dev
            return "unknown"


__all__ = ["DiagnosticsService"]
