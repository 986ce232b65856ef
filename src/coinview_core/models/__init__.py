"""Pydantic wire and domain models."""

from coinview_core.models.asset import Asset
from coinview_core.models.decoding import decode_many, decode_one
from coinview_core.models.market import AssetIcon, ExchangeRate, ServerErrorBody, TimeSeriesData
from coinview_core.models.preferences import Preferences
from coinview_core.models.timestamps import (
    CoinApiTimestamp,
    format_coinapi_timestamp,
    parse_coinapi_timestamp,
)

__all__ = [
    "Asset",
    "AssetIcon",
    "CoinApiTimestamp",
    "ExchangeRate",
    "Preferences",
    "ServerErrorBody",
    "TimeSeriesData",
    "decode_many",
    "decode_one",
    "format_coinapi_timestamp",
    "parse_coinapi_timestamp",
]
