from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from .common import CatalogBaseModel


class AssetKind(str, Enum):
    ATTACHMENT = "attachment"
    EMBED = "embed"
    DOCUMENT = "document"


class LocalAsset(CatalogBaseModel):
    """A persisted media item owned by the media store."""

    id: int
    canonical_url: str
    mime_type: str = ""
    kind: AssetKind = AssetKind.ATTACHMENT
    title: str = ""
    file_path: str | None = None
    size_bytes: int | None = Field(default=None, ge=0)
    created_at: datetime | None = None

    @property
    def is_attachment(self) -> bool:
        return self.kind == AssetKind.ATTACHMENT


class CatalogEntry(CatalogBaseModel):
    """Identifier and canonical URL pair used to build the URL index."""

    id: int
    canonical_url: str


class SourceUrlTag(CatalogBaseModel):
    """Remote location an asset was originally downloaded from."""

    asset_id: int
    source_url: str


class StoredAsset(CatalogBaseModel):
    """Result of persisting new content through the media store."""

    asset_id: int
    canonical_url: str
    mime_type: str = ""


__all__ = [
    "AssetKind",
    "CatalogEntry",
    "LocalAsset",
    "SourceUrlTag",
    "StoredAsset",
]
