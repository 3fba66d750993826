"""Repository interfaces for the asset catalog."""

from .assets import (
    AssetRepository,
    FILE_META_KEY,
    SIZE_META_KEY,
    SOURCE_URL_META_KEY,
)

__all__ = [
    "AssetRepository",
    "FILE_META_KEY",
    "SIZE_META_KEY",
    "SOURCE_URL_META_KEY",
]
