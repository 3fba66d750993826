from __future__ import annotations

import httpx
import respx
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from attachment_resolver.data import AssetKind, AssetRepository, SOURCE_URL_META_KEY
from attachment_resolver.data.sql import AssetMetaRecord
from attachment_resolver.services import AttachmentIndex, AttachmentResolver, MediaStore

from tests.factories import JPEG_BYTES, PNG_BYTES


def test_resolve_downloads_and_catalogues_new_url(
    resolver: AttachmentResolver,
    repository: AssetRepository,
    respx_mock: respx.Router,
) -> None:
    route = respx_mock.get("https://example.com/images/a.jpg").mock(
        return_value=httpx.Response(200, content=JPEG_BYTES)
    )

    asset_id = resolver.resolve("https://example.com/images/a.jpg")

    assert asset_id is not None
    assert route.call_count == 1
    asset = repository.get(asset_id)
    assert asset is not None
    assert asset.kind == AssetKind.ATTACHMENT
    assert asset.mime_type == "image/jpeg"
    assert asset.title == "a.jpg"
    assert asset.canonical_url.startswith("https://media.example.test/uploads/")
    assert asset.canonical_url.endswith("/a.jpg")
    assert repository.get_meta(asset_id, SOURCE_URL_META_KEY) == "https://example.com/images/a.jpg"

    assert resolver.resolve("https://example.com/images/a.jpg") == asset_id
    assert resolver.resolve(asset.canonical_url) == asset_id
    assert route.call_count == 1


def test_fresh_resolver_reuses_previously_uploaded_asset(
    media_store: MediaStore,
    repository: AssetRepository,
    fetcher,
    respx_mock: respx.Router,
) -> None:
    route = respx_mock.get("https://example.com/b.png").mock(
        return_value=httpx.Response(200, content=PNG_BYTES)
    )
    first = AttachmentResolver(media_store, AttachmentIndex(repository), fetcher)
    asset_id = first.resolve("https://example.com/b.png")

    second = AttachmentResolver(media_store, AttachmentIndex(repository), fetcher)

    assert second.resolve("https://example.com/b.png") == asset_id
    assert route.call_count == 1
    assert repository.count(kind=AssetKind.ATTACHMENT) == 1


def test_http_error_leaves_catalog_untouched(
    resolver: AttachmentResolver,
    repository: AssetRepository,
    respx_mock: respx.Router,
) -> None:
    respx_mock.get("https://example.com/missing.jpg").mock(return_value=httpx.Response(404))

    assert resolver.resolve("https://example.com/missing.jpg") is None
    assert repository.count() == 0


def test_disallowed_file_type_is_not_stored(
    resolver: AttachmentResolver,
    repository: AssetRepository,
    uploads,
    respx_mock: respx.Router,
) -> None:
    respx_mock.get("https://example.com/payload.exe").mock(
        return_value=httpx.Response(200, content=b"MZ\x90\x00")
    )

    assert resolver.resolve("https://example.com/payload.exe") is None
    assert repository.count() == 0
    assert uploads.stats().total_files == 0


def test_existing_attachment_id_resolves_without_network(
    resolver: AttachmentResolver,
    repository: AssetRepository,
    respx_mock: respx.Router,
) -> None:
    attachment = repository.add(canonical_url="https://cdn.example.test/c.jpg", mime_type="image/jpeg")
    embed = repository.add(canonical_url="https://video.example.test/v", kind=AssetKind.EMBED)

    assert resolver.resolve(attachment.id) == attachment.id
    assert resolver.resolve(str(attachment.id)) == attachment.id
    assert resolver.resolve(embed.id) is None
    assert resolver.resolve(attachment.id + embed.id + 100) is None
    assert not respx_mock.calls


def test_non_ascii_file_name_is_resolved(
    resolver: AttachmentResolver,
    repository: AssetRepository,
    respx_mock: respx.Router,
) -> None:
    url = "https://example.com/%E5%9B%BE.png"
    respx_mock.get(url).mock(return_value=httpx.Response(200, content=PNG_BYTES))

    asset_id = resolver.resolve(url)

    assert asset_id is not None
    asset = repository.get(asset_id)
    assert asset is not None
    assert asset.title == "图.png"
    assert asset.canonical_url.endswith("/%E5%9B%BE.png")
    assert resolver.resolve(url) == asset_id


def test_catalog_failure_while_tagging_does_not_duplicate_asset(
    resolver: AttachmentResolver,
    repository: AssetRepository,
    uploads,
    respx_mock: respx.Router,
) -> None:
    url = "https://example.com/tagged.png"
    route = respx_mock.get(url).mock(
        side_effect=lambda request: httpx.Response(200, content=PNG_BYTES)
    )
    failures = [OperationalError("INSERT INTO asset_meta", {}, Exception("database is locked"))]

    def _fail_once(_mapper, _connection, _target) -> None:
        if failures:
            raise failures.pop()

    event.listen(AssetMetaRecord, "before_insert", _fail_once)
    try:
        assert resolver.resolve(url) is None
        asset_id = resolver.resolve(url)
    finally:
        event.remove(AssetMetaRecord, "before_insert", _fail_once)

    assert asset_id is not None
    assert resolver.resolve(url) == asset_id
    assert route.call_count == 2
    assert repository.count(kind=AssetKind.ATTACHMENT) == 1
    assert repository.get_meta(asset_id, SOURCE_URL_META_KEY) == url
    assert uploads.stats().total_files == 1
    assert resolver.index.stats().url_locks == 0
