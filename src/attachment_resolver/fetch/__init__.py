"""Remote download support."""

from .client import FetchConfig, RemoteFetcher, is_valid_url

__all__ = ["FetchConfig", "RemoteFetcher", "is_valid_url"]
