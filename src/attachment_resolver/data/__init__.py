"""Data access layer: domain models, SQL catalog and upload storage."""

from .models import (
    AssetKind,
    CatalogEntry,
    LocalAsset,
    MediaReference,
    SourceUrlTag,
    StoredAsset,
)
from .sql import DatabaseConfig, DatabaseManager
from .repositories import AssetRepository, SOURCE_URL_META_KEY
from .storage import UploadStats, UploadStore, UploadedFile

__all__ = [
    "AssetKind",
    "AssetRepository",
    "CatalogEntry",
    "DatabaseConfig",
    "DatabaseManager",
    "LocalAsset",
    "MediaReference",
    "SOURCE_URL_META_KEY",
    "SourceUrlTag",
    "StoredAsset",
    "UploadStats",
    "UploadStore",
    "UploadedFile",
]
