"""Search and favorites filtering for the asset list."""

from __future__ import annotations

from collections.abc import Iterable

from coinview_core.models import Asset


def matches_filter(asset: Asset, search_text: str, favorites_only: bool) -> bool:
    """True if *asset* belongs in the displayed list.

    Search is a case-insensitive substring match on name or id; an empty
    search matches everything.
    """
    if favorites_only and not asset.is_favorite:
        return False
    if not search_text:
        return True
    needle = search_text.casefold()
    if asset.name is not None and needle in asset.name.casefold():
        return True
    return needle in asset.asset_id.casefold()


def filter_assets(assets: Iterable[Asset], search_text: str, favorites_only: bool) -> list[Asset]:
    return [a for a in assets if matches_filter(a, search_text, favorites_only)]
