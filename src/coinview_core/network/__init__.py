"""Network access — CoinAPI client, connectivity gate, retry policy."""

from coinview_core.network.client import CoinApiClient
from coinview_core.network.connectivity import (
    ConnectivityMonitor,
    ConnectivityStatus,
    ProbeConnectivityMonitor,
    StaticConnectivity,
)
from coinview_core.network.retry import RetryPolicy, with_retry

__all__ = [
    "CoinApiClient",
    "ConnectivityMonitor",
    "ConnectivityStatus",
    "ProbeConnectivityMonitor",
    "RetryPolicy",
    "StaticConnectivity",
    "with_retry",
]
