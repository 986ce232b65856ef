"""Import all table modules so Base.metadata knows about them."""

from coinview_core.db.tables.assets import AssetRow, PreferencesRow

__all__ = ["AssetRow", "PreferencesRow"]
