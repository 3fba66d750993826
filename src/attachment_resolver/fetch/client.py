from __future__ import annotations

import time
from dataclasses import dataclass
from types import TracebackType
from urllib.parse import urlsplit

import httpx

from attachment_resolver.config.settings import (
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_MAX_DOWNLOAD_BYTES,
    DEFAULT_USER_AGENT,
    Settings,
)
from attachment_resolver.errors import FetchError, FetchErrorCategory
from attachment_resolver.utils import get_logger, sanitize_log_message


logger = get_logger(__name__)

ALLOWED_SCHEMES = frozenset({"http", "https"})


def is_valid_url(url: str) -> bool:
    """Return True for absolute http(s) URLs with a host and no whitespace."""

    if not url or any(ch.isspace() for ch in url):
        return False
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return False
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        return False
    if not parts.hostname:
        return False
    if port is not None and not 0 < port < 65536:
        return False
    return True


@dataclass(slots=True)
class FetchConfig:
    timeout: float = DEFAULT_FETCH_TIMEOUT
    max_bytes: int = DEFAULT_MAX_DOWNLOAD_BYTES
    user_agent: str = DEFAULT_USER_AGENT
    follow_redirects: bool = True
    auth_token: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> FetchConfig:
        return cls(
            timeout=settings.fetch_timeout,
            max_bytes=settings.max_download_bytes,
            user_agent=settings.user_agent,
            auth_token=settings.fetch_auth_token,
        )

    def headers(self) -> dict[str, str]:
        headers = {"User-Agent": self.user_agent, "Accept": "image/*,*/*;q=0.8"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers


class RemoteFetcher:
    """Blocking downloader for remote source files."""

    def __init__(
        self,
        config: FetchConfig | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self._config = config or FetchConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=self._config.timeout,
            follow_redirects=self._config.follow_redirects,
            headers=self._config.headers(),
        )

    @property
    def config(self) -> FetchConfig:
        return self._config

    def fetch(self, url: str) -> bytes:
        """Download ``url`` and return its body, raising FetchError on any failure."""

        if not is_valid_url(url):
            raise FetchError(
                "URL is not a valid absolute http(s) URL",
                category=FetchErrorCategory.INVALID_URL,
                url=url,
            )

        start = time.perf_counter()
        try:
            with self._client.stream("GET", url) as response:
                if response.status_code != 200:
                    raise FetchError(
                        f"Unexpected HTTP status {response.status_code}",
                        category=FetchErrorCategory.HTTP_STATUS,
                        url=url,
                        status_code=response.status_code,
                    )
                self._check_declared_length(response, url)
                body = self._read_limited(response, url)
        except httpx.TimeoutException as exc:
            raise FetchError(
                "Timed out downloading source file",
                category=FetchErrorCategory.TIMEOUT,
                url=url,
                inner_error=exc,
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(
                f"Network error downloading source file: {exc}",
                category=FetchErrorCategory.NETWORK,
                url=url,
                inner_error=exc,
            ) from exc

        logger.debug(
            "Fetched source file",
            url=sanitize_log_message(url),
            size=len(body),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return body

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> RemoteFetcher:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    # --------------------------------------------------------------- Helpers

    def _check_declared_length(self, response: httpx.Response, url: str) -> None:
        declared = response.headers.get("Content-Length")
        if declared is None:
            return
        try:
            length = int(declared)
        except ValueError:
            return
        if length > self._config.max_bytes:
            raise FetchError(
                f"Source file declares {length} bytes, above the {self._config.max_bytes} byte limit",
                category=FetchErrorCategory.TOO_LARGE,
                url=url,
                status_code=response.status_code,
            )

    def _read_limited(self, response: httpx.Response, url: str) -> bytes:
        chunks: list[bytes] = []
        received = 0
        for chunk in response.iter_bytes():
            received += len(chunk)
            if received > self._config.max_bytes:
                raise FetchError(
                    f"Source file exceeds the {self._config.max_bytes} byte limit",
                    category=FetchErrorCategory.TOO_LARGE,
                    url=url,
                    status_code=response.status_code,
                )
            chunks.append(chunk)
        return b"".join(chunks)


__all__ = ["FetchConfig", "RemoteFetcher", "is_valid_url"]
