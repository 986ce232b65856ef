"""Cache stores for assets and user preferences."""

from coinview_core.store.base import AssetStore, PreferencesStore
from coinview_core.store.memory import InMemoryAssetStore, InMemoryPreferencesStore
from coinview_core.store.sql import SqlAssetStore, SqlPreferencesStore

__all__ = [
    "AssetStore",
    "InMemoryAssetStore",
    "InMemoryPreferencesStore",
    "PreferencesStore",
    "SqlAssetStore",
    "SqlPreferencesStore",
]
