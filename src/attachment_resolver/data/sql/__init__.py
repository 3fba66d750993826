"""SQLModel persistence layer for the asset catalog."""

from .engine import DatabaseConfig, DatabaseManager
from .models import AssetMetaRecord, AssetRecord

__all__ = [
    "DatabaseConfig",
    "DatabaseManager",
    "AssetRecord",
    "AssetMetaRecord",
]
