"""Configuration helpers for the attachment resolver."""

from .settings import DEFAULT_ALLOWED_MIME_TYPES, Settings, SettingsManager

__all__ = [
    "DEFAULT_ALLOWED_MIME_TYPES",
    "Settings",
    "SettingsManager",
]
