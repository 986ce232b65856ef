"""TimeSeriesController — rate history and current rate for one asset."""

from __future__ import annotations

from datetime import datetime

import structlog

from coinview_core.exceptions import DecodingFailed
from coinview_core.models import ExchangeRate, TimeSeriesData, decode_many, decode_one
from coinview_core.network.client import CoinApiClient
from coinview_core.viewstate.observable import ObservableState

log = structlog.get_logger("time_series")


class TimeSeriesController(ObservableState):
    """Daily rate history of ``asset_id_base`` against the fixed quote currency."""

    def __init__(
        self,
        client: CoinApiClient,
        asset_id_base: str,
        start: datetime,
        end: datetime,
        *,
        asset_id_quote: str | None = None,
        period: str = "1DAY",
    ) -> None:
        super().__init__()
        self._client = client
        self.asset_id_base = asset_id_base
        self.asset_id_quote = asset_id_quote or client.quote_asset
        self.start = start
        self.end = end
        self.period = period

        self.time_series: list[TimeSeriesData] = []
        self.exchange_rate: ExchangeRate | None = None

    async def load(self) -> None:
        """Fetch the history. Dropped if a load is already running."""
        if self.is_loading:
            return
        self.is_loading = True
        self._publish()
        try:
            data = await self._client.fetch_exchange_rate_history(
                self.asset_id_base,
                self.start,
                self.end,
                asset_id_quote=self.asset_id_quote,
                period=self.period,
            )
            bars = decode_many(TimeSeriesData, data)
        except Exception as exc:
            self._record_failure(
                exc, "time_series_load_failed",
                base=self.asset_id_base, quote=self.asset_id_quote,
            )
            return
        finally:
            self.is_loading = False
            self._publish()

        self._record_success()
        self.time_series = sorted(bars, key=lambda bar: bar.time_period_start)
        log.info(
            "time_series_loaded",
            base=self.asset_id_base,
            quote=self.asset_id_quote,
            bars=len(self.time_series),
        )
        self._publish()

    async def load_rate(self) -> None:
        """Fetch the current exchange rate for the pair."""
        try:
            data = await self._client.fetch_exchange_rate(self.asset_id_base, self.asset_id_quote)
            rate = decode_one(ExchangeRate, data)
            if not rate.is_valid_quote:
                raise DecodingFailed()
        except Exception as exc:
            self._record_failure(
                exc, "exchange_rate_load_failed",
                base=self.asset_id_base, quote=self.asset_id_quote,
            )
            self._publish()
            return

        self._record_success()
        self.exchange_rate = rate
        self._publish()

    @property
    def period_bounds(self) -> tuple[datetime, datetime] | None:
        """First and last period start of the loaded series, for axis labels."""
        if not self.time_series:
            return None
        return self.time_series[0].time_period_start, self.time_series[-1].time_period_start
