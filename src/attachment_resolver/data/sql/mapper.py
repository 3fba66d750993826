from __future__ import annotations

from attachment_resolver.data.models import LocalAsset

from .models import AssetRecord


def record_to_asset(record: AssetRecord) -> LocalAsset:
    if record.id is None:
        raise ValueError("Asset record has not been persisted")
    return LocalAsset(
        id=record.id,
        canonical_url=record.canonical_url,
        mime_type=record.mime_type,
        kind=record.kind,
        title=record.title,
        file_path=record.file_path,
        size_bytes=record.size_bytes,
        created_at=record.created_at,
    )


__all__ = ["record_to_asset"]
