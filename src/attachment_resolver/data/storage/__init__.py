"""Binary upload storage helpers."""

from .uploads import UploadStats, UploadStore, UploadedFile

__all__ = ["UploadStats", "UploadStore", "UploadedFile"]
