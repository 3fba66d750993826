"""Service layer composing storage, catalog and download collaborators."""

from .diagnostics import DiagnosticsService
from .index import AssetCatalog, AttachmentIndex, IndexState, IndexStats
from .media_store import MediaStore
from .registry import ServiceRegistry
from .resolver import AttachmentResolver, filename_hint_for

__all__ = [
    "AssetCatalog",
    "AttachmentIndex",
    "AttachmentResolver",
    "DiagnosticsService",
    "IndexState",
    "IndexStats",
    "MediaStore",
    "ServiceRegistry",
    "filename_hint_for",
]
