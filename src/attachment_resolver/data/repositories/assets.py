from __future__ import annotations

from collections.abc import Mapping

from sqlalchemy import delete, func
from sqlmodel import select

from attachment_resolver.data.models import (
    AssetKind,
    CatalogEntry,
    LocalAsset,
    SourceUrlTag,
)
from attachment_resolver.data.sql import AssetMetaRecord, AssetRecord, DatabaseManager
from attachment_resolver.data.sql.mapper import record_to_asset
from attachment_resolver.utils import get_logger


logger = get_logger(__name__)

SOURCE_URL_META_KEY = "_original_source_url"
FILE_META_KEY = "_attachment_file"
SIZE_META_KEY = "_attachment_size"


class AssetRepository:
    """Relational catalog of stored assets and their metadata rows."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    # ------------------------------------------------------------ Bulk reads

    def list_assets(self) -> list[CatalogEntry]:
        """Return id/canonical URL pairs for every attachment."""

        with self._db.session() as session:
            stmt = select(AssetRecord.id, AssetRecord.canonical_url).where(
                AssetRecord.kind == AssetKind.ATTACHMENT.value
            )
            rows = session.exec(stmt).all()
            return [
                CatalogEntry(id=asset_id, canonical_url=canonical_url)
                for asset_id, canonical_url in rows
            ]

    def list_source_url_tags(self) -> list[SourceUrlTag]:
        """Return every source URL annotation recorded on an attachment."""

        with self._db.session() as session:
            stmt = (
                select(AssetRecord.id, AssetMetaRecord.meta_value)
                .join(AssetMetaRecord, AssetMetaRecord.asset_id == AssetRecord.id)
                .where(AssetRecord.kind == AssetKind.ATTACHMENT.value)
                .where(AssetMetaRecord.meta_key == SOURCE_URL_META_KEY)
            )
            rows = session.exec(stmt).all()
            return [
                SourceUrlTag(asset_id=asset_id, source_url=source_url)
                for asset_id, source_url in rows
                if source_url
            ]

    def list_all(self) -> list[LocalAsset]:
        with self._db.session() as session:
            records = session.exec(select(AssetRecord).order_by(AssetRecord.id)).all()
            return [record_to_asset(record) for record in records]

    def count(self, *, kind: AssetKind | None = None) -> int:
        with self._db.session() as session:
            stmt = select(func.count(AssetRecord.id))
            if kind is not None:
                stmt = stmt.where(AssetRecord.kind == kind.value)
            return session.exec(stmt).one()

    # ---------------------------------------------------------- Single items

    def get(self, asset_id: int) -> LocalAsset | None:
        with self._db.session() as session:
            record = session.get(AssetRecord, asset_id)
            return record_to_asset(record) if record else None

    def add(
        self,
        *,
        canonical_url: str,
        title: str = "",
        mime_type: str = "",
        kind: AssetKind = AssetKind.ATTACHMENT,
        file_path: str | None = None,
        size_bytes: int | None = None,
        meta: Mapping[str, str] | None = None,
    ) -> LocalAsset:
        """Insert an asset together with its metadata rows in one transaction."""

        record = AssetRecord(
            kind=kind.value,
            canonical_url=canonical_url,
            title=title,
            mime_type=mime_type,
            file_path=file_path,
            size_bytes=size_bytes,
        )
        with self._db.session() as session:
            session.add(record)
            session.flush()
            for key, value in (meta or {}).items():
                session.add(AssetMetaRecord(asset_id=record.id, meta_key=key, meta_value=value))
            session.commit()
            session.refresh(record)
            asset = record_to_asset(record)
        logger.debug("Catalogued asset", asset_id=asset.id, kind=kind.value)
        return asset

    def set_meta(self, asset_id: int, key: str, value: str | None) -> None:
        """Create or replace the single value stored under ``key`` for an asset."""

        with self._db.session() as session:
            stmt = select(AssetMetaRecord).where(
                AssetMetaRecord.asset_id == asset_id,
                AssetMetaRecord.meta_key == key,
            )
            record = session.exec(stmt).first()
            if record is None:
                record = AssetMetaRecord(asset_id=asset_id, meta_key=key)
            record.meta_value = value
            session.add(record)
            session.commit()

    def get_meta(self, asset_id: int, key: str) -> str | None:
        with self._db.session() as session:
            stmt = select(AssetMetaRecord.meta_value).where(
                AssetMetaRecord.asset_id == asset_id,
                AssetMetaRecord.meta_key == key,
            )
            return session.exec(stmt).first()

    def delete_asset(self, asset_id: int) -> bool:
        """Remove an asset and its metadata; returns False when it did not exist."""

        with self._db.session() as session:
            record = session.get(AssetRecord, asset_id)
            if record is None:
                return False
            session.exec(delete(AssetMetaRecord).where(AssetMetaRecord.asset_id == asset_id))
            session.delete(record)
            session.commit()
        logger.info("Deleted asset", asset_id=asset_id)
        return True


__all__ = [
    "AssetRepository",
    "FILE_META_KEY",
    "SIZE_META_KEY",
    "SOURCE_URL_META_KEY",
]
