from __future__ import annotations

from dataclasses import dataclass, fields

from attachment_resolver.data import AssetRepository, DatabaseManager
from attachment_resolver.fetch import RemoteFetcher

from .diagnostics import DiagnosticsService
from .index import AttachmentIndex
from .media_store import MediaStore
from .resolver import AttachmentResolver


@dataclass(slots=True)
class ServiceRegistry:
    """One instance per capability, built once at startup and passed around."""

    database: DatabaseManager | None = None
    catalog: AssetRepository | None = None
    media_store: MediaStore | None = None
    index: AttachmentIndex | None = None
    fetcher: RemoteFetcher | None = None
    resolver: AttachmentResolver | None = None
    diagnostics: DiagnosticsService | None = None

    def get(self, name: str) -> object:
        """Return the service registered under ``name``.

        Raises ``KeyError`` when the capability is unknown or was not built.
        """

        if name not in self.capabilities():
            raise KeyError(f"Unknown service capability: {name}")
        service = getattr(self, name)
        if service is None:
            raise KeyError(f"Service capability not initialised: {name}")
        return service

    @classmethod
    def capabilities(cls) -> tuple[str, ...]:
        return tuple(field.name for field in fields(cls))

    def close(self) -> None:
        if self.fetcher is not None:
            self.fetcher.close()
        if self.database is not None:
            self.database.dispose()


__all__ = ["ServiceRegistry"]
