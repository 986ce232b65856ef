"""Merge freshly fetched assets with what the client already holds.

Server fields come from the fetch. ``is_favorite`` is carried over from the
held copy, and ``last_fetched`` is stamped for every asset seen before. An
asset seen for the first time keeps its defaults (not a favorite, never
fetched).

The fetch is treated as a complete snapshot: output order and membership
are exactly those of ``fresh``, so anything held but not re-fetched drops
out of the result.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

from coinview_core.models import Asset


def reconcile(
    fresh: Sequence[Asset],
    held: Sequence[Asset],
    now: datetime | None = None,
) -> list[Asset]:
    now = now or datetime.now(timezone.utc)
    held_by_id = {asset.asset_id: asset for asset in held}

    merged: list[Asset] = []
    for asset in fresh:
        previous = held_by_id.get(asset.asset_id)
        if previous is None:
            merged.append(asset.model_copy(update={"is_favorite": False, "last_fetched": None}))
        else:
            merged.append(asset.model_copy(update={
                "is_favorite": previous.is_favorite,
                "last_fetched": now,
            }))
    return merged
