from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FetchErrorCategory(str, Enum):
    INVALID_URL = "invalid_url"
    NETWORK = "network"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    TOO_LARGE = "too_large"


class StoreErrorReason(str, Enum):
    EMPTY = "empty"
    FILENAME = "filename"
    FILE_TYPE = "file_type"
    WRITE_FAILED = "write_failed"
    CATALOG = "catalog"


class ResolverError(Exception):
    """Base class for collaborator failures the resolver collapses to "not found"."""


@dataclass(slots=True)
class FetchError(ResolverError):
    message: str
    category: FetchErrorCategory = FetchErrorCategory.NETWORK
    url: str | None = None
    status_code: int | None = None
    inner_error: Exception | None = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message

    @property
    def is_retriable(self) -> bool:
        if self.category in {FetchErrorCategory.NETWORK, FetchErrorCategory.TIMEOUT}:
            return True
        if self.status_code and 500 <= self.status_code <= 599:
            return True
        return False


@dataclass(slots=True)
class StoreError(ResolverError):
    message: str
    reason: StoreErrorReason = StoreErrorReason.WRITE_FAILED
    filename: str | None = None
    inner_error: Exception | None = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


__all__ = [
    "FetchError",
    "FetchErrorCategory",
    "ResolverError",
    "StoreError",
    "StoreErrorReason",
]
