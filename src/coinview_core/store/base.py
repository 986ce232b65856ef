"""Store interfaces the controllers depend on."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

from coinview_core.models import Asset, Preferences


class AssetStore(Protocol):
    """Persistent asset records keyed by ``asset_id``."""

    def load_all(self) -> list[Asset]: ...

    def upsert_all(self, assets: Sequence[Asset]) -> None: ...

    def get(self, asset_id: str) -> Asset | None: ...

    def get_many(self, asset_ids: Iterable[str]) -> dict[str, Asset]: ...

    def set_favorite(self, asset_id: str, is_favorite: bool) -> bool:
        """Update one record's favorite flag; False if it isn't stored."""
        ...


class PreferencesStore(Protocol):
    """The single persisted preferences record."""

    def load(self) -> Preferences: ...

    def save(self, preferences: Preferences) -> None: ...
