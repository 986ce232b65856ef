"""SQLAlchemy-backed stores."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from datetime import datetime, timezone

import structlog
from sqlalchemy import select, update
from sqlalchemy.orm import Session, sessionmaker

from coinview_core.db.engine import session_scope
from coinview_core.db.tables.assets import AssetRow, PreferencesRow
from coinview_core.models import Asset, Preferences

log = structlog.get_logger("asset_store")

# SQLite caps bound parameters per statement; stay well under it.
DEFAULT_BATCH_SIZE = 500

PREFERENCES_ROW_ID = 1

_DATETIME_FIELDS = frozenset({
    "data_quote_start",
    "data_quote_end",
    "data_orderbook_start",
    "data_orderbook_end",
    "data_trade_start",
    "data_trade_end",
})


def _as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; everything stored is UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _chunks(items: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for i in range(0, len(items), size):
        yield items[i:i + size]


def row_to_asset(row: AssetRow) -> Asset | None:
    """Rebuild an Asset from its row; None when the row has no asset_id."""
    if not row.asset_id:
        return None
    values = {field: getattr(row, field) for field in Asset.SERVER_FIELDS}
    for field in _DATETIME_FIELDS:
        values[field] = _as_utc(values[field])
    return Asset(
        asset_id=row.asset_id,
        is_favorite=bool(row.is_favorite),
        last_fetched=_as_utc(row.cache_last_updated),
        **values,
    )


def apply_asset(row: AssetRow, asset: Asset) -> None:
    """Overwrite every server field plus the favorite flag and cache time."""
    for field, value in asset.server_fields().items():
        setattr(row, field, value)
    row.is_favorite = asset.is_favorite
    row.cache_last_updated = asset.last_fetched


class SqlAssetStore:
    """Asset cache on top of the ``assets`` table."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self._session_factory = session_factory
        self._batch_size = batch_size

    def load_all(self) -> list[Asset]:
        """Every cached asset, in insertion order. Rows without an id are skipped."""
        assets: list[Asset] = []
        with session_scope(self._session_factory) as session:
            for row in session.scalars(select(AssetRow).order_by(AssetRow.id)):
                asset = row_to_asset(row)
                if asset is None:
                    log.warning("asset_cache_row_skipped", row_id=row.id, reason="missing asset_id")
                    continue
                assets.append(asset)
        return assets

    def _existing_rows(self, session: Session, asset_ids: Sequence[str]) -> dict[str, AssetRow]:
        existing: dict[str, AssetRow] = {}
        for chunk in _chunks(asset_ids, self._batch_size):
            rows = session.scalars(select(AssetRow).where(AssetRow.asset_id.in_(chunk)))
            for row in rows:
                existing[row.asset_id] = row
        return existing

    def upsert_all(self, assets: Sequence[Asset]) -> None:
        """Insert or overwrite *assets* in a single transaction.

        Existing rows for the whole batch are fetched up front, a chunk of
        ids per query, rather than one lookup per asset.
        """
        if not assets:
            return
        asset_ids = list(dict.fromkeys(a.asset_id for a in assets))
        with session_scope(self._session_factory) as session:
            existing = self._existing_rows(session, asset_ids)
            inserted = 0
            for asset in assets:
                row = existing.get(asset.asset_id)
                if row is None:
                    row = AssetRow(asset_id=asset.asset_id)
                    session.add(row)
                    existing[asset.asset_id] = row
                    inserted += 1
                apply_asset(row, asset)
        log.info("asset_cache_upserted", count=len(assets), inserted=inserted)

    def get(self, asset_id: str) -> Asset | None:
        with session_scope(self._session_factory) as session:
            row = session.scalars(select(AssetRow).where(AssetRow.asset_id == asset_id)).first()
            return row_to_asset(row) if row is not None else None

    def get_many(self, asset_ids: Iterable[str]) -> dict[str, Asset]:
        ids = list(dict.fromkeys(asset_ids))
        found: dict[str, Asset] = {}
        with session_scope(self._session_factory) as session:
            for asset_id, row in self._existing_rows(session, ids).items():
                asset = row_to_asset(row)
                if asset is not None:
                    found[asset_id] = asset
        return found

    def set_favorite(self, asset_id: str, is_favorite: bool) -> bool:
        with session_scope(self._session_factory) as session:
            result = session.execute(
                update(AssetRow)
                .where(AssetRow.asset_id == asset_id)
                .values(is_favorite=is_favorite)
            )
            return result.rowcount > 0


class SqlPreferencesStore:
    """Search text and favorites-only flag in a single ``preferences`` row."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def load(self) -> Preferences:
        with session_scope(self._session_factory) as session:
            row = session.get(PreferencesRow, PREFERENCES_ROW_ID)
            if row is None:
                return Preferences()
            return Preferences(search_text=row.search_text, favorites_only=row.favorites_only)

    def save(self, preferences: Preferences) -> None:
        with session_scope(self._session_factory) as session:
            row = session.get(PreferencesRow, PREFERENCES_ROW_ID)
            if row is None:
                row = PreferencesRow(id=PREFERENCES_ROW_ID)
                session.add(row)
            row.search_text = preferences.search_text
            row.favorites_only = preferences.favorites_only
