from __future__ import annotations

from pathlib import PurePosixPath
from typing import Protocol
from urllib.parse import unquote, urlsplit

from attachment_resolver.data.models import LocalAsset, MediaReference, StoredAsset
from attachment_resolver.errors import FetchError, ResolverError, StoreError
from attachment_resolver.fetch import is_valid_url
from attachment_resolver.utils import get_logger, sanitize_log_message

from .index import AttachmentIndex


logger = get_logger(__name__)


class AssetStore(Protocol):
    def store(
        self,
        content: bytes,
        filename_hint: str,
        *,
        source_url: str | None = None,
    ) -> StoredAsset: ...

    def tag_source_url(self, asset_id: int, url: str) -> None: ...

    def get_asset(self, asset_id: int) -> LocalAsset | None: ...


class Fetcher(Protocol):
    def fetch(self, url: str) -> bytes: ...


def filename_hint_for(url: str) -> str:
    """Return the last path segment of ``url``, percent-decoded."""

    path = unquote(urlsplit(url).path)
    return PurePosixPath(path).name


class AttachmentResolver:
    """Map featured-image references to local attachment ids, uploading once per URL.

    Every failure (unknown id, wrong kind, invalid URL, download or storage
    error) collapses to ``None`` so callers can fall back to "no image".
    """

    def __init__(
        self,
        store: AssetStore,
        index: AttachmentIndex,
        fetcher: Fetcher,
    ) -> None:
        self._store = store
        self._index = index
        self._fetcher = fetcher

    @property
    def index(self) -> AttachmentIndex:
        return self._index

    def resolve(self, reference: object) -> int | None:
        parsed = MediaReference.parse(reference)
        if parsed is None:
            return None
        try:
            if parsed.url is not None:
                return self._resolve_url(parsed.url)
            if parsed.asset_id is not None:
                return self._resolve_asset_id(parsed.asset_id)
        except ResolverError as exc:
            logger.warning(
                "Attachment could not be resolved",
                reference=sanitize_log_message(str(reference)),
                error=str(exc),
            )
        except Exception:  # noqa: BLE001 - resolution failures must not escape
            logger.exception(
                "Unexpected error while resolving attachment",
                reference=sanitize_log_message(str(reference)),
            )
        return None

    def reset(self) -> None:
        self._index.reset()

    # --------------------------------------------------------------- Helpers

    def _resolve_asset_id(self, asset_id: int) -> int | None:
        asset = self._store.get_asset(asset_id)
        if asset is None or not asset.is_attachment:
            logger.debug("Asset id is not an attachment", asset_id=asset_id)
            return None
        return asset.id

    def _resolve_url(self, url: str) -> int | None:
        existing = self._index.lookup(url)
        if existing is not None:
            return existing

        if not is_valid_url(url):
            logger.debug("Rejected invalid attachment URL", url=sanitize_log_message(url))
            return None

        with self._index.lock_for(url):
            # Another caller may have uploaded this URL while we waited.
            existing = self._index.lookup(url)
            if existing is not None:
                return existing
            return self._upload(url)

    def _upload(self, url: str) -> int | None:
        try:
            content = self._fetcher.fetch(url)
        except FetchError as exc:
            logger.info(
                "Source file download failed",
                url=sanitize_log_message(url),
                category=exc.category.value,
                status_code=exc.status_code,
                retriable=exc.is_retriable,
            )
            return None

        try:
            stored = self._store.store(content, filename_hint_for(url), source_url=url)
        except StoreError as exc:
            logger.info(
                "Source file rejected by media store",
                url=sanitize_log_message(url),
                reason=exc.reason.value,
            )
            return None

        self._index.remember(
            stored.asset_id,
            canonical_url=stored.canonical_url,
            source_url=url,
        )
        logger.info(
            "Uploaded attachment from source URL",
            url=sanitize_log_message(url),
            asset_id=stored.asset_id,
        )
        return stored.asset_id


__all__ = ["AssetStore", "AttachmentResolver", "Fetcher", "filename_hint_for"]
