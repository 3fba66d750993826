from __future__ import annotations

from attachment_resolver.config import Settings, SettingsManager
from attachment_resolver.data import (
    AssetRepository,
    DatabaseConfig,
    DatabaseManager,
    UploadStore,
)
from attachment_resolver.fetch import FetchConfig, RemoteFetcher
from attachment_resolver.services import (
    AttachmentIndex,
    AttachmentResolver,
    DiagnosticsService,
    MediaStore,
    ServiceRegistry,
)
from attachment_resolver.utils import get_logger


logger = get_logger(__name__)


def build_services(settings: Settings | None = None) -> ServiceRegistry:
    """Construct every service once and return them in a registry."""

    settings = settings or SettingsManager().load()

    db = DatabaseManager(DatabaseConfig(path=settings.database_path))
    db.ensure_schema()

    catalog = AssetRepository(db)
    uploads = UploadStore(
        settings.uploads_dir,
        base_url=settings.normalised_base_url,
        allowed_mime_types=settings.allowed_mime_types,
    )
    media_store = MediaStore(uploads, catalog)
    index = AttachmentIndex(catalog)
    fetcher = RemoteFetcher(FetchConfig.from_settings(settings))
    resolver = AttachmentResolver(media_store, index, fetcher)
    diagnostics = DiagnosticsService(settings, db, catalog, uploads, index)

    logger.debug(
        "Service registry initialised",
        database=str(settings.database_path),
        uploads=str(settings.uploads_dir),
    )
    return ServiceRegistry(
        database=db,
        catalog=catalog,
        media_store=media_store,
        index=index,
        fetcher=fetcher,
        resolver=resolver,
        diagnostics=diagnostics,
    )


__all__ = ["build_services"]
