"""Wire config, database, client and stores into ready-to-use controllers.

Everything is built per call and handed around explicitly; nothing here
is a process-wide singleton.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import httpx
import structlog
from sqlalchemy import Engine

from coinview_core.config.schema import AppConfig
from coinview_core.db.engine import create_store_engine, init_schema, make_session_factory
from coinview_core.network.client import CoinApiClient
from coinview_core.network.connectivity import ConnectivityMonitor
from coinview_core.store.sql import SqlAssetStore, SqlPreferencesStore
from coinview_core.viewstate.asset_list import AssetListController
from coinview_core.viewstate.time_series import TimeSeriesController

log = structlog.get_logger("bootstrap")


@dataclass
class Services:
    config: AppConfig
    engine: Engine
    client: CoinApiClient
    asset_store: SqlAssetStore
    preferences_store: SqlPreferencesStore

    def asset_list(self) -> AssetListController:
        return AssetListController(
            self.client,
            self.asset_store,
            self.preferences_store,
            icon_size=self.config.api.icon_size,
        )

    def time_series(self, asset_id_base: str, start: datetime, end: datetime) -> TimeSeriesController:
        return TimeSeriesController(self.client, asset_id_base, start, end)

    async def close(self) -> None:
        await self.client.close()
        self.engine.dispose()


def build_services(
    config: AppConfig | None = None,
    *,
    connectivity: ConnectivityMonitor | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Services:
    """Create the engine and schema, the stores and the API client."""
    config = config or AppConfig()
    if not config.api.api_key:
        log.warning("api_key_missing", hint="set COINVIEW_API_KEY")

    engine = create_store_engine(config.database.url)
    init_schema(engine)
    factory = make_session_factory(engine)

    return Services(
        config=config,
        engine=engine,
        client=CoinApiClient.from_config(config, connectivity=connectivity, transport=transport),
        asset_store=SqlAssetStore(factory),
        preferences_store=SqlPreferencesStore(factory),
    )
