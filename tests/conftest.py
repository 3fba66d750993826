from __future__ import annotations

from collections.abc import Iterator

import pytest

from attachment_resolver.config.settings import Settings
from attachment_resolver.data import (
    AssetRepository,
    DatabaseConfig,
    DatabaseManager,
    UploadStore,
)
from attachment_resolver.fetch import FetchConfig, RemoteFetcher
from attachment_resolver.services import AttachmentIndex, AttachmentResolver, MediaStore
from attachment_resolver.utils import LoggingOptions, configure_logging

from tests.factories import make_settings


configure_logging(LoggingOptions(level="DEBUG", file_sink=False))


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def database(settings: Settings) -> Iterator[DatabaseManager]:
    """Create an isolated SQLite database for catalog tests."""

    manager = DatabaseManager(DatabaseConfig(path=settings.database_path))
    manager.ensure_schema()
    yield manager
    manager.dispose()


@pytest.fixture
def repository(database: DatabaseManager) -> AssetRepository:
    return AssetRepository(database)


@pytest.fixture
def uploads(settings: Settings) -> UploadStore:
    return UploadStore(
        settings.uploads_dir,
        base_url=settings.normalised_base_url,
        allowed_mime_types=settings.allowed_mime_types,
    )


@pytest.fixture
def media_store(uploads: UploadStore, repository: AssetRepository) -> MediaStore:
    return MediaStore(uploads, repository)


@pytest.fixture
def fetcher(settings: Settings) -> Iterator[RemoteFetcher]:
    remote = RemoteFetcher(FetchConfig.from_settings(settings))
    yield remote
    remote.close()


@pytest.fixture
def resolver(
    media_store: MediaStore,
    repository: AssetRepository,
    fetcher: RemoteFetcher,
) -> AttachmentResolver:
    """Resolver wired to a real catalog and upload directory; HTTP is mocked per test."""

    return AttachmentResolver(media_store, AttachmentIndex(repository), fetcher)
