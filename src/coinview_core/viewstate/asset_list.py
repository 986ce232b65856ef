"""AssetListController — cache-first asset loading, filtering, favorites."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import Any

import structlog

from coinview_core.models import Asset, AssetIcon, Preferences, decode_many
from coinview_core.network.client import CoinApiClient
from coinview_core.reconcile import reconcile
from coinview_core.store.base import AssetStore, PreferencesStore
from coinview_core.viewstate.filtering import filter_assets
from coinview_core.viewstate.observable import ObservableState

log = structlog.get_logger("asset_list")


class AssetListController(ObservableState):
    """Holds the asset list a presentation layer renders.

    ``assets`` is the full known collection; ``filtered_assets`` is what the
    list shows and is recomputed after every change to ``assets``,
    ``search_text`` or ``favorites_only``. Store writes run in worker
    threads, one at a time and in the order they were requested; ``flush()``
    waits for the outstanding ones.
    """

    def __init__(
        self,
        client: CoinApiClient,
        store: AssetStore,
        preferences: PreferencesStore,
        *,
        icon_size: int = 32,
    ) -> None:
        super().__init__()
        self._client = client
        self._store = store
        self._preferences = preferences
        self.icon_size = icon_size

        self.assets: list[Asset] = []
        self._index: dict[str, int] = {}
        self.filtered_assets: list[Asset] = []
        self.search_text = ""
        self.favorites_only = False
        self.icon_urls: dict[str, str] = {}

        self._restoring_preferences = False
        self._write_lock = asyncio.Lock()
        self._pending_writes: set[asyncio.Task] = set()

        self.restore_preferences()

    # ── Preferences ───────────────────────────────────────────

    def restore_preferences(self) -> None:
        """Load saved filters once, without writing them straight back."""
        try:
            saved = self._preferences.load()
        except Exception:
            log.exception("preferences_load_failed")
            return
        self._restoring_preferences = True
        try:
            self._update_filters(saved.search_text, saved.favorites_only)
        finally:
            self._restoring_preferences = False

    def set_search_text(self, search_text: str) -> None:
        self._update_filters(search_text, self.favorites_only)

    def set_favorites_only(self, favorites_only: bool) -> None:
        self._update_filters(self.search_text, favorites_only)

    def _update_filters(self, search_text: str, favorites_only: bool) -> None:
        self.search_text = search_text
        self.favorites_only = favorites_only
        self._recompute()
        if self._restoring_preferences:
            return
        prefs = Preferences(search_text=search_text, favorites_only=favorites_only)
        self._write_in_background("preferences_save", self._preferences.save, prefs)

    # ── Derived state ─────────────────────────────────────────

    def _set_assets(self, assets: Sequence[Asset]) -> None:
        self.assets = list(assets)
        self._index = {asset.asset_id: i for i, asset in enumerate(self.assets)}
        self._recompute()

    def _recompute(self) -> None:
        self.filtered_assets = filter_assets(self.assets, self.search_text, self.favorites_only)
        self._publish()

    def get_asset(self, asset_id: str) -> Asset | None:
        idx = self._index.get(asset_id)
        return self.assets[idx] if idx is not None else None

    def icon_url(self, asset_id: str) -> str | None:
        return self.icon_urls.get(asset_id)

    # ── Loading ───────────────────────────────────────────────

    async def load(self) -> None:
        """Show the cached list, then replace it with a fresh, merged fetch.

        A call made while another load is in flight is dropped.
        """
        if self.is_loading:
            log.debug("asset_load_skipped", reason="already loading")
            return
        self.is_loading = True
        self._publish()
        try:
            merged = await self._load()
        finally:
            self.is_loading = False
        if merged is None:
            self._publish()
            return

        self._record_success()
        self._set_assets(merged)
        log.info("asset_load_complete", count=len(merged))
        self._write_in_background("asset_cache_write", self._store.upsert_all, merged)

    async def _load(self) -> list[Asset] | None:
        # Earlier writes must land before the cache is read back.
        await self.flush()
        # Held assets are never older than the cache, which only seeds a cold
        # start. Re-checked after the read since other calls run meanwhile.
        if not self.assets:
            cached = await self._read_cache()
            if cached and not self.assets:
                self._set_assets(cached)
                log.info("asset_cache_published", count=len(cached))

        try:
            data = await self._client.fetch_assets()
            fresh = decode_many(Asset, data)
        except Exception as exc:
            self._record_failure(exc, "asset_load_failed")
            return None
        return reconcile(fresh, self.assets)

    async def refresh_asset(self, asset_id: str) -> None:
        """Re-fetch one asset and merge it into the list."""
        try:
            data = await self._client.fetch_asset(asset_id)
            fresh = decode_many(Asset, data)
        except Exception as exc:
            self._record_failure(exc, "asset_refresh_failed", asset_id=asset_id)
            self._publish()
            return

        merged = reconcile(fresh, self.assets)
        assets = list(self.assets)
        for asset in merged:
            idx = self._index.get(asset.asset_id)
            if idx is None:
                assets.append(asset)
            else:
                assets[idx] = asset
        self._record_success()
        self._set_assets(assets)
        self._write_in_background("asset_cache_write", self._store.upsert_all, merged)

    async def load_icons(self, icon_size: int | None = None) -> None:
        """Fetch the icon set and index icon URLs by asset id."""
        try:
            data = await self._client.fetch_asset_icons(icon_size or self.icon_size)
            icons = decode_many(AssetIcon, data)
        except Exception as exc:
            self._record_failure(exc, "asset_icons_failed")
            self._publish()
            return

        self.icon_urls = {
            icon.asset_id: icon.url
            for icon in icons
            if icon.asset_id and icon.url
        }
        self._publish()
        log.info("asset_icons_indexed", count=len(self.icon_urls), received=len(icons))

    async def _read_cache(self) -> list[Asset]:
        try:
            return await asyncio.to_thread(self._store.load_all)
        except Exception:
            log.exception("asset_cache_read_failed")
            return []

    # ── Favorites ─────────────────────────────────────────────

    def toggle_favorite(self, asset_id: str) -> bool:
        """Flip the favorite flag on one asset. Returns False if it isn't known."""
        idx = self._index.get(asset_id)
        if idx is None:
            return False
        updated = self.assets[idx].model_copy(update={"is_favorite": not self.assets[idx].is_favorite})
        self.assets[idx] = updated
        self._recompute()
        self._write_in_background("favorite_write", self._persist_favorite, updated)
        return True

    def _persist_favorite(self, asset: Asset) -> None:
        if not self._store.set_favorite(asset.asset_id, asset.is_favorite):
            self._store.upsert_all([asset])

    # ── Background writes ─────────────────────────────────────

    def _write_in_background(self, event: str, fn: Callable[..., Any], *args: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop (e.g. restore at construction): write inline.
            self._run_write(event, fn, *args)
            return
        task = loop.create_task(self._write(event, fn, *args))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write(self, event: str, fn: Callable[..., Any], *args: Any) -> None:
        async with self._write_lock:
            await asyncio.to_thread(self._run_write, event, fn, *args)

    @staticmethod
    def _run_write(event: str, fn: Callable[..., Any], *args: Any) -> None:
        try:
            fn(*args)
        except Exception:
            log.exception(f"{event}_failed")

    async def flush(self) -> None:
        """Wait for every store write scheduled so far."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))
