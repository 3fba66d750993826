"""Domain models for stored media and featured-image references."""

from .asset import AssetKind, CatalogEntry, LocalAsset, SourceUrlTag, StoredAsset
from .common import CatalogBaseModel
from .reference import MediaReference

__all__ = [
    "AssetKind",
    "CatalogBaseModel",
    "CatalogEntry",
    "LocalAsset",
    "MediaReference",
    "SourceUrlTag",
    "StoredAsset",
]
