from __future__ import annotations

import httpx
import pytest
import respx

from attachment_resolver.errors import FetchError, FetchErrorCategory
from attachment_resolver.fetch import FetchConfig, RemoteFetcher, is_valid_url

from tests.factories import JPEG_BYTES


@pytest.mark.parametrize(
    ("url", "valid"),
    [
        ("https://example.com/a.jpg", True),
        ("http://example.com:8080/a.jpg?x=1", True),
        ("HTTPS://EXAMPLE.COM/A.JPG", True),
        ("not a url", False),
        ("example.com/a.jpg", False),
        ("ftp://example.com/a.jpg", False),
        ("https:///a.jpg", False),
        ("https://exa mple.com/a.jpg", False),
        ("https://example.com:99999/a.jpg", False),
        ("", False),
    ],
)
def test_is_valid_url(url: str, valid: bool) -> None:
    assert is_valid_url(url) is valid


def test_fetch_returns_body_and_sends_headers(respx_mock: respx.Router) -> None:
    route = respx_mock.get("https://example.com/a.jpg").mock(
        return_value=httpx.Response(200, content=JPEG_BYTES)
    )
    config = FetchConfig(user_agent="test-agent/1.0", auth_token="s3cret")

    with RemoteFetcher(config) as fetcher:
        body = fetcher.fetch("https://example.com/a.jpg")

    assert body == JPEG_BYTES
    request = route.calls.last.request
    assert request.headers["User-Agent"] == "test-agent/1.0"
    assert request.headers["Authorization"] == "Bearer s3cret"


def test_fetch_follows_redirects(respx_mock: respx.Router) -> None:
    respx_mock.get("https://example.com/old.jpg").mock(
        return_value=httpx.Response(301, headers={"Location": "https://cdn.example.com/new.jpg"})
    )
    respx_mock.get("https://cdn.example.com/new.jpg").mock(
        return_value=httpx.Response(200, content=JPEG_BYTES)
    )

    with RemoteFetcher() as fetcher:
        assert fetcher.fetch("https://example.com/old.jpg") == JPEG_BYTES


@pytest.mark.parametrize("status", [204, 403, 404, 500])
def test_non_200_status_raises(respx_mock: respx.Router, status: int) -> None:
    respx_mock.get("https://example.com/a.jpg").mock(return_value=httpx.Response(status))

    with RemoteFetcher() as fetcher, pytest.raises(FetchError) as excinfo:
        fetcher.fetch("https://example.com/a.jpg")

    assert excinfo.value.category is FetchErrorCategory.HTTP_STATUS
    assert excinfo.value.status_code == status
    assert excinfo.value.is_retriable is (status >= 500)


def test_network_error_is_wrapped(respx_mock: respx.Router) -> None:
    respx_mock.get("https://example.com/a.jpg").mock(side_effect=httpx.ConnectError("refused"))

    with RemoteFetcher() as fetcher, pytest.raises(FetchError) as excinfo:
        fetcher.fetch("https://example.com/a.jpg")

    assert excinfo.value.category is FetchErrorCategory.NETWORK
    assert isinstance(excinfo.value.inner_error, httpx.ConnectError)


def test_timeout_is_wrapped(respx_mock: respx.Router) -> None:
    respx_mock.get("https://example.com/a.jpg").mock(side_effect=httpx.ReadTimeout("slow"))

    with RemoteFetcher() as fetcher, pytest.raises(FetchError) as excinfo:
        fetcher.fetch("https://example.com/a.jpg")

    assert excinfo.value.category is FetchErrorCategory.TIMEOUT
    assert excinfo.value.is_retriable


def test_body_over_limit_is_rejected(respx_mock: respx.Router) -> None:
    respx_mock.get("https://example.com/big.jpg").mock(
        return_value=httpx.Response(200, content=b"x" * 64)
    )

    with RemoteFetcher(FetchConfig(max_bytes=16)) as fetcher, pytest.raises(FetchError) as excinfo:
        fetcher.fetch("https://example.com/big.jpg")

    assert excinfo.value.category is FetchErrorCategory.TOO_LARGE


def test_invalid_url_is_rejected_without_request(respx_mock: respx.Router) -> None:
    with RemoteFetcher() as fetcher, pytest.raises(FetchError) as excinfo:
        fetcher.fetch("not a url")

    assert excinfo.value.category is FetchErrorCategory.INVALID_URL
    assert not respx_mock.calls


def test_injected_client_is_not_closed() -> None:
    client = httpx.Client()
    fetcher = RemoteFetcher(client=client)

    fetcher.close()

    assert not client.is_closed
    client.close()
