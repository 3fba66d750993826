from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


def _utc_now() -> datetime:
    return datetime.now(UTC)


class AssetRecord(SQLModel, table=True):
    """Stored media item addressable by id and canonical URL."""

    __tablename__ = "assets"

    id: int | None = Field(default=None, primary_key=True)
    kind: str = Field(default="attachment", index=True)
    canonical_url: str = Field(index=True)
    title: str = Field(default="")
    mime_type: str = Field(default="")
    file_path: str | None = Field(default=None)
    size_bytes: int | None = Field(default=None)
    created_at: datetime = Field(default_factory=_utc_now, nullable=False)


class AssetMetaRecord(SQLModel, table=True):
    """Key/value annotation attached to an asset."""

    __tablename__ = "asset_meta"

    id: int | None = Field(default=None, primary_key=True)
    asset_id: int = Field(foreign_key="assets.id", index=True)
    meta_key: str = Field(index=True)
    meta_value: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
