"""Tests for the SQL and in-memory cache stores."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy import event, select

from coinview_core.db.tables import AssetRow, PreferencesRow
from coinview_core.models import Asset, Preferences
from coinview_core.store import (
    InMemoryAssetStore,
    InMemoryPreferencesStore,
    SqlAssetStore,
)


NOW = datetime(2025, 1, 9, 12, 0, 0, tzinfo=timezone.utc)


class SelectCounter:
    def __init__(self, engine) -> None:
        self.count = 0
        event.listen(engine, "before_cursor_execute", self._on_execute)

    def _on_execute(self, conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("SELECT"):
            self.count += 1


class TestSqlAssetStoreLoad:
    def test_empty(self, asset_store):
        assert asset_store.load_all() == []

    def test_round_trip_all_fields(self, asset_store, asset_factory):
        asset = asset_factory(
            "BTC",
            "Bitcoin",
            data_quote_start=datetime(2014, 2, 24, 17, 43, 5, tzinfo=timezone.utc),
            data_symbols_count=226436,
            volume_1day_usd=98765432101.5,
            price_usd=94123.4567,
            is_favorite=True,
            last_fetched=NOW,
        )
        asset_store.upsert_all([asset])
        [loaded] = asset_store.load_all()
        assert loaded == asset
        assert loaded.last_fetched.tzinfo is not None

    def test_rows_without_asset_id_are_skipped(self, asset_store, db_session, asset_factory):
        db_session.add(AssetRow(asset_id=None, name="orphan", type_is_crypto=1))
        db_session.commit()
        asset_store.upsert_all([asset_factory("ETH", "Ethereum")])
        assert [a.asset_id for a in asset_store.load_all()] == ["ETH"]

    def test_insertion_order(self, asset_store, asset_factory):
        asset_store.upsert_all([asset_factory("B"), asset_factory("A"), asset_factory("C")])
        assert [a.asset_id for a in asset_store.load_all()] == ["B", "A", "C"]


class TestSqlAssetStoreUpsert:
    def test_insert_then_update(self, asset_store, db_session, asset_factory):
        asset_store.upsert_all([asset_factory("BTC", "Bitcoin", price_usd=1.0)])
        asset_store.upsert_all([asset_factory("BTC", "Bitcoin v2", price_usd=2.0, is_favorite=True)])

        rows = db_session.scalars(select(AssetRow)).all()
        assert len(rows) == 1
        assert rows[0].name == "Bitcoin v2"
        assert rows[0].price_usd == 2.0
        assert rows[0].is_favorite is True

    def test_update_clears_server_fields_that_went_away(self, asset_store, asset_factory):
        asset_store.upsert_all([asset_factory("BTC", "Bitcoin", price_usd=1.0)])
        asset_store.upsert_all([asset_factory("BTC", None)])
        loaded = asset_store.get("BTC")
        assert loaded.name is None
        assert loaded.price_usd is None

    def test_cache_timestamp_written(self, asset_store, db_session, asset_factory):
        asset_store.upsert_all([asset_factory("BTC", last_fetched=NOW)])
        row = db_session.scalars(select(AssetRow)).one()
        assert row.cache_last_updated.replace(tzinfo=timezone.utc) == NOW

    def test_duplicate_ids_in_one_batch(self, asset_store, asset_factory):
        asset_store.upsert_all([asset_factory("BTC", "first"), asset_factory("BTC", "second")])
        assert [a.name for a in asset_store.load_all()] == ["second"]

    def test_empty_batch_is_noop(self, asset_store):
        asset_store.upsert_all([])
        assert asset_store.load_all() == []

    def test_existing_rows_fetched_in_batches(self, engine, session_factory, asset_factory):
        store = SqlAssetStore(session_factory, batch_size=50)
        store.upsert_all([asset_factory(f"A{i}") for i in range(120)])

        counter = SelectCounter(engine)
        store.upsert_all([asset_factory(f"A{i}", "renamed") for i in range(200)])
        # ceil(200 / 50) lookups, not one per asset.
        assert counter.count == 4
        assert len(store.load_all()) == 200
        assert {a.name for a in store.load_all()} == {"renamed"}

    def test_batch_is_atomic(self, asset_store, asset_factory):
        asset_store.upsert_all([asset_factory("BTC", "Bitcoin")])

        class Exploding(Asset):
            def server_fields(self):
                raise RuntimeError("disk on fire")

        bad = Exploding(asset_id="ETH", type_is_crypto=1)
        with pytest.raises(RuntimeError):
            asset_store.upsert_all([asset_factory("BTC", "changed"), bad])
        assert [(a.asset_id, a.name) for a in asset_store.load_all()] == [("BTC", "Bitcoin")]


class TestSqlAssetStoreLookup:
    def test_get(self, asset_store, asset_factory):
        asset_store.upsert_all([asset_factory("BTC", "Bitcoin")])
        assert asset_store.get("BTC").name == "Bitcoin"
        assert asset_store.get("NOPE") is None

    def test_get_many(self, asset_store, asset_factory):
        asset_store.upsert_all([asset_factory("BTC"), asset_factory("ETH"), asset_factory("MST")])
        found = asset_store.get_many(["MST", "BTC", "NOPE"])
        assert set(found) == {"MST", "BTC"}
        assert found["MST"].asset_id == "MST"

    def test_set_favorite(self, asset_store, asset_factory):
        asset_store.upsert_all([asset_factory("BTC", "Bitcoin", price_usd=5.0)])
        assert asset_store.set_favorite("BTC", True) is True
        loaded = asset_store.get("BTC")
        assert loaded.is_favorite is True
        assert loaded.price_usd == 5.0

    def test_set_favorite_unknown(self, asset_store):
        assert asset_store.set_favorite("NOPE", True) is False


class TestSqlPreferencesStore:
    def test_defaults_when_never_saved(self, preferences_store):
        assert preferences_store.load() == Preferences()

    def test_save_and_load(self, preferences_store, db_session):
        preferences_store.save(Preferences(search_text="coin", favorites_only=True))
        preferences_store.save(Preferences(search_text="btc", favorites_only=False))
        assert preferences_store.load() == Preferences(search_text="btc", favorites_only=False)
        assert len(db_session.scalars(select(PreferencesRow)).all()) == 1


class TestInMemoryStores:
    def test_asset_store_contract(self, asset_factory):
        store = InMemoryAssetStore([asset_factory("BTC", "Bitcoin")])
        store.upsert_all([asset_factory("ETH"), asset_factory("BTC", "Bitcoin v2")])
        assert [a.name for a in store.load_all()] == ["Bitcoin v2", None]
        assert store.get_many(["ETH", "X"]).keys() == {"ETH"}
        assert store.set_favorite("ETH", True) is True
        assert store.get("ETH").is_favorite is True
        assert store.set_favorite("X", True) is False
        assert store.upsert_batches == [2]

    def test_preferences_store(self):
        store = InMemoryPreferencesStore()
        store.save(Preferences(search_text="x"))
        assert store.load().search_text == "x"
        assert store.save_count == 1
