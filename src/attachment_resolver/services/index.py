from __future__ import annotations

import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from attachment_resolver.data.models import CatalogEntry, SourceUrlTag
from attachment_resolver.utils import get_logger


logger = get_logger(__name__)


class AssetCatalog(Protocol):
    """Bulk queries used to (re)build the in-memory URL index."""

    def list_assets(self) -> Sequence[CatalogEntry]: ...

    def list_source_url_tags(self) -> Sequence[SourceUrlTag]: ...


class IndexState(StrEnum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"


@dataclass(slots=True, frozen=True)
class IndexStats:
    state: IndexState
    canonical_urls: int
    source_urls: int
    loads: int
    url_locks: int = 0


@dataclass(slots=True)
class _UrlLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class AttachmentIndex:
    """In-memory map from canonical and source URLs to attachment ids.

    The whole catalog is read on the first lookup after construction or
    ``reset()``; afterwards lookups are served from memory and new uploads
    are added through ``remember()``.
    """

    def __init__(self, catalog: AssetCatalog) -> None:
        self._catalog = catalog
        self._canonical_urls: dict[str, int] = {}
        self._source_urls: dict[str, int] = {}
        self._state = IndexState.UNINITIALIZED
        self._loads = 0
        self._load_lock = threading.Lock()
        self._url_locks: dict[str, _UrlLock] = {}
        self._url_locks_guard = threading.Lock()

    @property
    def state(self) -> IndexState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is IndexState.INITIALIZED

    # ------------------------------------------------------------------ Public

    def lookup(self, url: str) -> int | None:
        """Return the attachment id known for ``url``, canonical URLs first."""

        self.ensure_loaded()
        asset_id = self._canonical_urls.get(url)
        if asset_id is not None:
            return asset_id
        return self._source_urls.get(url)

    def remember(self, asset_id: int, *, canonical_url: str, source_url: str) -> None:
        self.ensure_loaded()
        self._canonical_urls[canonical_url] = asset_id
        self._source_urls[source_url] = asset_id

    def reset(self) -> None:
        with self._load_lock:
            self._canonical_urls = {}
            self._source_urls = {}
            self._state = IndexState.UNINITIALIZED
        logger.debug("Attachment index reset")

    def ensure_loaded(self) -> None:
        if self._state is IndexState.INITIALIZED:
            return
        with self._load_lock:
            if self._state is IndexState.INITIALIZED:
                return
            self._load()

    @contextmanager
    def lock_for(self, url: str) -> Iterator[None]:
        """Serialise uploads of a single source URL.

        The per-URL entry is dropped when its last holder or waiter leaves.
        """

        with self._url_locks_guard:
            entry = self._url_locks.get(url)
            if entry is None:
                entry = self._url_locks[url] = _UrlLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._url_locks_guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._url_locks[url]

    def stats(self) -> IndexStats:
        return IndexStats(
            state=self._state,
            canonical_urls=len(self._canonical_urls),
            source_urls=len(self._source_urls),
            loads=self._loads,
            url_locks=len(self._url_locks),
        )

    # --------------------------------------------------------------- Helpers

    def _load(self) -> None:
        entries = self._catalog.list_assets()
        tags = self._catalog.list_source_url_tags()
        self._canonical_urls = {entry.canonical_url: entry.id for entry in entries}
        self._source_urls = {tag.source_url: tag.asset_id for tag in tags}
        self._state = IndexState.INITIALIZED
        self._loads += 1
        logger.debug(
            "Attachment index loaded",
            canonical_urls=len(self._canonical_urls),
            source_urls=len(self._source_urls),
        )


__all__ = ["AssetCatalog", "AttachmentIndex", "IndexState", "IndexStats"]
