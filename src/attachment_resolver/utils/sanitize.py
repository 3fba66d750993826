from __future__ import annotations

import re
from typing import Final

_FILENAME_DISALLOWED_PATTERN: Final[re.Pattern[str]] = re.compile(r"[^\w.\-]+")
_REPEATED_SEPARATORS: Final[re.Pattern[str]] = re.compile(r"[-_]{2,}")

_CONTROL_CHARS: Final[frozenset[str]] = frozenset(
    chr(code) for code in range(0x00, 0x20) if chr(code) not in {"\t", "\n"}
)


def sanitize_filename(value: str) -> str:
    """Reduce a filename hint to word characters (any script), dots and hyphens."""

    trimmed = value.strip().replace(" ", "-")
    cleaned = _FILENAME_DISALLOWED_PATTERN.sub("", trimmed)
    cleaned = _REPEATED_SEPARATORS.sub("-", cleaned)
    return cleaned.strip(".-_")


def sanitize_log_message(value: str) -> str:
    """Normalise log messages by stripping control characters and CR sequences."""

    normalised = value.replace("\r\n", "\n").replace("\r", "\n")
    return "".join(ch for ch in normalised if ch not in _CONTROL_CHARS)


def obfuscate_secret(value: str, *, visible: int = 4) -> str:
    """Mask all but the trailing ``visible`` characters of a secret."""

    if not value:
        return value
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]


__all__ = ["obfuscate_secret", "sanitize_filename", "sanitize_log_message"]
