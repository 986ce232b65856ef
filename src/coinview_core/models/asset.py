"""Asset model — CoinAPI asset metadata plus locally owned cache state."""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, ValidationInfo, model_validator

from coinview_core.models.timestamps import CoinApiTimestamp

WIRE_CONTEXT = {"source": "wire"}


class Asset(BaseModel):
    """A tradable instrument (crypto or fiat) as listed by ``/assets``.

    ``is_favorite`` and ``last_fetched`` are owned by this client: the user
    sets the former, reconciliation sets the latter. Both are dropped when a
    record is decoded from the wire. ``price_usd`` and the volumes are floats
    because that's what the API returns; don't compare them for equality.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    SERVER_FIELDS: ClassVar[tuple[str, ...]] = (
        "name",
        "type_is_crypto",
        "data_quote_start",
        "data_quote_end",
        "data_orderbook_start",
        "data_orderbook_end",
        "data_trade_start",
        "data_trade_end",
        "data_symbols_count",
        "volume_1hrs_usd",
        "volume_1day_usd",
        "volume_1mth_usd",
        "price_usd",
    )
    LOCAL_FIELDS: ClassVar[tuple[str, ...]] = ("is_favorite", "last_fetched")

    asset_id: str
    name: str | None = None
    type_is_crypto: int
    data_quote_start: CoinApiTimestamp | None = None
    data_quote_end: CoinApiTimestamp | None = None
    data_orderbook_start: CoinApiTimestamp | None = None
    data_orderbook_end: CoinApiTimestamp | None = None
    data_trade_start: CoinApiTimestamp | None = None
    data_trade_end: CoinApiTimestamp | None = None
    data_symbols_count: int | None = None
    volume_1hrs_usd: float | None = None
    volume_1day_usd: float | None = None
    volume_1mth_usd: float | None = None
    price_usd: float | None = None

    is_favorite: bool = False
    last_fetched: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _drop_local_fields_from_wire(cls, data: Any, info: ValidationInfo) -> Any:
        if info.context == WIRE_CONTEXT and isinstance(data, dict):
            return {k: v for k, v in data.items() if k not in cls.LOCAL_FIELDS}
        return data

    @property
    def display_name(self) -> str:
        """``name`` when the API supplied one, otherwise the asset id."""
        return self.name or self.asset_id

    def server_fields(self) -> dict[str, Any]:
        return {field: getattr(self, field) for field in self.SERVER_FIELDS}
