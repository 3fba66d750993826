from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class MediaReference:
    """Either a remote URL or the id of an existing local asset, never both."""

    url: str | None = None
    asset_id: int | None = None

    def __post_init__(self) -> None:
        if (self.url is None) == (self.asset_id is None):
            raise ValueError("MediaReference requires exactly one of url or asset_id")

    @classmethod
    def parse(cls, value: object) -> MediaReference | None:
        """Interpret a raw featured-image value.

        Integers and numeric strings are asset ids; any other non-empty
        string is treated as a URL. Empty values, zero and unsupported types
        yield ``None``.
        """

        if isinstance(value, MediaReference):
            return value
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            return cls(asset_id=value) if value > 0 else None
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return None
            if text.isdigit():
                asset_id = int(text)
                return cls(asset_id=asset_id) if asset_id > 0 else None
            return cls(url=text)
        return None


__all__ = ["MediaReference"]
