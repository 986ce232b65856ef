"""Dict-backed stores with the same contract as the SQL ones."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from coinview_core.models import Asset, Preferences


class InMemoryAssetStore:
    def __init__(self, assets: Iterable[Asset] = ()) -> None:
        self._assets: dict[str, Asset] = {a.asset_id: a for a in assets}
        self.upsert_batches: list[int] = []

    def load_all(self) -> list[Asset]:
        return list(self._assets.values())

    def upsert_all(self, assets: Sequence[Asset]) -> None:
        for asset in assets:
            self._assets[asset.asset_id] = asset
        self.upsert_batches.append(len(assets))

    def get(self, asset_id: str) -> Asset | None:
        return self._assets.get(asset_id)

    def get_many(self, asset_ids: Iterable[str]) -> dict[str, Asset]:
        return {i: self._assets[i] for i in asset_ids if i in self._assets}

    def set_favorite(self, asset_id: str, is_favorite: bool) -> bool:
        asset = self._assets.get(asset_id)
        if asset is None:
            return False
        self._assets[asset_id] = asset.model_copy(update={"is_favorite": is_favorite})
        return True


class InMemoryPreferencesStore:
    def __init__(self, preferences: Preferences | None = None) -> None:
        self._preferences = preferences or Preferences()
        self.save_count = 0

    def load(self) -> Preferences:
        return self._preferences

    def save(self, preferences: Preferences) -> None:
        self._preferences = preferences
        self.save_count += 1
