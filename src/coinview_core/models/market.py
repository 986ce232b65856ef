"""Icon, exchange-rate and time-series models, plus the error envelope."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from coinview_core.models.timestamps import CoinApiTimestamp


class AssetIcon(BaseModel):
    """One entry of ``/assets/icons/{size}``.

    Every field is optional in the API docs, even though an icon without a
    ``url`` is useless for display.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    exchange_id: str | None = None
    asset_id: str | None = None
    url: str | None = None


class ExchangeRate(BaseModel):
    """Current rate for a (base, quote) pair."""

    model_config = ConfigDict(strict=True, frozen=True)

    time: CoinApiTimestamp
    asset_id_base: str | None = None
    asset_id_quote: str | None = None
    rate: float

    @property
    def is_valid_quote(self) -> bool:
        return self.rate > 0


class TimeSeriesData(BaseModel):
    """One OHLC bar of ``/exchangerate/{base}/{quote}/history``."""

    model_config = ConfigDict(strict=True, frozen=True)

    time_period_start: CoinApiTimestamp
    time_period_end: CoinApiTimestamp
    time_open: CoinApiTimestamp | None = None
    time_close: CoinApiTimestamp | None = None
    rate_open: float | None = None
    rate_high: float | None = None
    rate_low: float | None = None
    rate_close: float | None = None


class ServerErrorBody(BaseModel):
    """The ``{"error": "..."}`` body CoinAPI sends with non-200 responses."""

    model_config = ConfigDict(strict=True, frozen=True)

    error: str
