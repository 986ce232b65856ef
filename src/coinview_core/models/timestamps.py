"""CoinAPI timestamp parsing.

CoinAPI renders times with seven fractional digits and a zone designator,
e.g. ``2025-01-09T10:03:59.5855665Z`` or ``2025-01-09T10:03:59.5855665+01:00``.
Python's ``%f`` stops at six digits, so the seventh (100ns) digit is dropped.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Annotated, Any

from pydantic import BeforeValidator

_COINAPI_TS = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})T(?P<time>\d{2}:\d{2}:\d{2})"
    r"\.(?P<frac>\d{7})"
    r"(?P<tz>Z|[+-]\d{2}:?\d{2})$"
)


def parse_coinapi_timestamp(value: str) -> datetime:
    """Parse a CoinAPI timestamp string into an aware datetime.

    Raises ValueError for anything that isn't in the CoinAPI format.
    """
    m = _COINAPI_TS.match(value)
    if m is None:
        raise ValueError(f"not a CoinAPI timestamp: {value!r}")

    base = datetime.strptime(f"{m['date']}T{m['time']}", "%Y-%m-%dT%H:%M:%S")
    micro = int(m["frac"][:6])

    tz_raw = m["tz"]
    if tz_raw == "Z":
        tz = timezone.utc
    else:
        sign = -1 if tz_raw[0] == "-" else 1
        digits = tz_raw[1:].replace(":", "")
        offset = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
        tz = timezone(sign * offset)

    return base.replace(microsecond=micro, tzinfo=tz)


def format_coinapi_timestamp(value: datetime) -> str:
    """Render a datetime in CoinAPI's seven-digit UTC form."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond:06d}0Z"


def _coerce_coinapi_timestamp(value: Any) -> Any:
    # Already-built datetimes come from the cache layer, not the wire.
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return parse_coinapi_timestamp(value)
    raise ValueError(f"expected a CoinAPI timestamp string, got {type(value).__name__}")


CoinApiTimestamp = Annotated[datetime, BeforeValidator(_coerce_coinapi_timestamp)]
