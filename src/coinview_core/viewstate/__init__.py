"""Observable view state consumed by the presentation layer."""

from coinview_core.viewstate.asset_list import AssetListController
from coinview_core.viewstate.filtering import filter_assets, matches_filter
from coinview_core.viewstate.observable import ObservableState
from coinview_core.viewstate.time_series import TimeSeriesController

__all__ = [
    "AssetListController",
    "ObservableState",
    "TimeSeriesController",
    "filter_assets",
    "matches_filter",
]
