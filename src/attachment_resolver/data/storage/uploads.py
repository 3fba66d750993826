from __future__ import annotations

import mimetypes
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath
from urllib.parse import quote

from attachment_resolver.config.settings import (
    DEFAULT_ALLOWED_MIME_TYPES,
    DEFAULT_BASE_URL,
)
from attachment_resolver.errors import StoreError, StoreErrorReason
from attachment_resolver.utils import get_logger, sanitize_filename


logger = get_logger(__name__)

# Older interpreters ship without this mapping.
mimetypes.add_type("image/webp", ".webp")


@dataclass(slots=True, frozen=True)
class UploadedFile:
    path: Path
    relative_path: str
    url: str
    mime_type: str
    size_bytes: int


@dataclass(slots=True, frozen=True)
class UploadStats:
    total_files: int
    total_bytes: int
    last_modified: datetime | None = None


class UploadStore:
    """Writes uploaded content into dated folders below a public root."""

    def __init__(
        self,
        base_dir: Path,
        *,
        base_url: str = DEFAULT_BASE_URL,
        allowed_mime_types: Sequence[str] = DEFAULT_ALLOWED_MIME_TYPES,
    ) -> None:
        self._base_dir = base_dir
        self._base_dir.mkdir(parents=True, exist_ok=True)
        self._base_url = base_url.rstrip("/")
        self._allowed_mime_types = frozenset(allowed_mime_types)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    # ------------------------------------------------------------------ Public

    def write(
        self,
        filename_hint: str,
        data: bytes,
        *,
        now: datetime | None = None,
    ) -> UploadedFile:
        if not data:
            raise StoreError("Refusing to store empty content", reason=StoreErrorReason.EMPTY)

        filename = self._safe_filename(filename_hint)
        if not filename:
            raise StoreError(
                "Filename hint is empty after sanitising",
                reason=StoreErrorReason.FILENAME,
                filename=filename_hint,
            )

        mime_type = self.mime_type_for(filename)
        if mime_type is None or mime_type not in self._allowed_mime_types:
            raise StoreError(
                "File type is not permitted",
                reason=StoreErrorReason.FILE_TYPE,
                filename=filename,
            )

        moment = now or datetime.now(UTC)
        subdir = PurePosixPath(f"{moment:%Y}", f"{moment:%m}")
        directory = self._base_dir / subdir
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path = self._reserve_path(directory, filename)
            tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
            try:
                tmp_path.write_bytes(data)
                tmp_path.replace(path)
            except OSError:
                tmp_path.unlink(missing_ok=True)
                path.unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StoreError(
                f"Unable to write upload: {exc}",
                reason=StoreErrorReason.WRITE_FAILED,
                filename=filename,
                inner_error=exc,
            ) from exc

        relative = str(subdir / path.name)
        logger.debug("Wrote upload", path=str(path), size=len(data))
        return UploadedFile(
            path=path,
            relative_path=relative,
            url=f"{self._base_url}/{quote(relative)}",
            mime_type=mime_type,
            size_bytes=len(data),
        )

    def delete(self, relative_path: str) -> None:
        path = self._base_dir / relative_path
        try:
            path.unlink()
        except FileNotFoundError:  # pragma: no cover - best effort
            return

    def purge(self) -> int:
        removed = 0
        for path in self._all_files():
            path.unlink(missing_ok=True)
            removed += 1
        logger.info("Upload directory purged", files=removed)
        return removed

    def stats(self) -> UploadStats:
        total_files = 0
        total_bytes = 0
        last_modified: datetime | None = None
        for path in self._all_files():
            stat = path.stat()
            total_files += 1
            total_bytes += stat.st_size
            modified = datetime.fromtimestamp(stat.st_mtime, tz=UTC)
            if last_modified is None or modified > last_modified:
                last_modified = modified
        return UploadStats(
            total_files=total_files,
            total_bytes=total_bytes,
            last_modified=last_modified,
        )

    @staticmethod
    def mime_type_for(filename: str) -> str | None:
        mime_type, _ = mimetypes.guess_type(filename, strict=False)
        return mime_type

    # --------------------------------------------------------------- Helpers

    @staticmethod
    def _safe_filename(filename_hint: str) -> str:
        stem, dot, extension = filename_hint.strip().rpartition(".")
        if not dot:
            stem, extension = extension, ""
        safe_stem = sanitize_filename(stem)
        safe_extension = sanitize_filename(extension)
        if not safe_extension:
            return safe_stem
        if not safe_stem:
            # Nothing usable survived; keep the extension so the type check still works.
            safe_stem = f"upload-{uuid.uuid4().hex[:12]}"
        return f"{safe_stem}.{safe_extension}"

    def _reserve_path(self, directory: Path, filename: str) -> Path:
        """Claim ``filename`` (or the first free ``-N`` variant) by creating it exclusively."""

        stem = PurePosixPath(filename).stem
        suffix = PurePosixPath(filename).suffix
        candidate = directory / filename
        counter = 0
        while True:
            try:
                with candidate.open("xb"):
                    return candidate
            except FileExistsError:
                counter += 1
                candidate = directory / f"{stem}-{counter}{suffix}"

    def _all_files(self) -> Iterable[Path]:
        if not self._base_dir.exists():
            return []
        return sorted(
            path
            for path in self._base_dir.rglob("*")
            if path.is_file() and not path.name.endswith(".tmp")
        )


__all__ = ["UploadStats", "UploadStore", "UploadedFile"]
