from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from attachment_resolver.data.models import LocalAsset, StoredAsset
from attachment_resolver.data.repositories import (
    FILE_META_KEY,
    SIZE_META_KEY,
    SOURCE_URL_META_KEY,
    AssetRepository,
)
from attachment_resolver.data.storage import UploadStore
from attachment_resolver.errors import StoreError, StoreErrorReason
from attachment_resolver.utils import get_logger


logger = get_logger(__name__)


class MediaStore:
    """Persist uploaded content as attachments and annotate them."""

    def __init__(self, uploads: UploadStore, repository: AssetRepository) -> None:
        self._uploads = uploads
        self._repository = repository

    @property
    def uploads(self) -> UploadStore:
        return self._uploads

    def store(
        self,
        content: bytes,
        filename_hint: str,
        *,
        source_url: str | None = None,
    ) -> StoredAsset:
        """Write ``content`` and catalogue it; ``source_url`` is tagged in the same transaction."""

        uploaded = self._uploads.write(filename_hint, content)
        meta = {
            FILE_META_KEY: uploaded.relative_path,
            SIZE_META_KEY: str(uploaded.size_bytes),
        }
        if source_url:
            meta[SOURCE_URL_META_KEY] = source_url
        try:
            asset = self._repository.add(
                canonical_url=uploaded.url,
                title=uploaded.path.name,
                mime_type=uploaded.mime_type,
                file_path=uploaded.relative_path,
                size_bytes=uploaded.size_bytes,
                meta=meta,
            )
        except SQLAlchemyError as exc:
            self._uploads.delete(uploaded.relative_path)
            raise StoreError(
                f"Unable to catalogue upload: {exc}",
                reason=StoreErrorReason.CATALOG,
                filename=uploaded.path.name,
                inner_error=exc,
            ) from exc

        logger.info(
            "Stored attachment",
            asset_id=asset.id,
            url=uploaded.url,
            mime_type=uploaded.mime_type,
        )
        return StoredAsset(
            asset_id=asset.id,
            canonical_url=asset.canonical_url,
            mime_type=asset.mime_type,
        )

    def tag_source_url(self, asset_id: int, url: str) -> None:
        self._repository.set_meta(asset_id, SOURCE_URL_META_KEY, url)

    def get_asset(self, asset_id: int) -> LocalAsset | None:
        return self._repository.get(asset_id)


__all__ = ["MediaStore"]
