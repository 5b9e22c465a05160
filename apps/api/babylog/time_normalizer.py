"""Turn free-form time expressions from the classifier into absolute timestamps."""
from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Optional

_MINUTES_AGO = re.compile(r"(\d+)\s*minutes?\s*ago", re.IGNORECASE)
_HOURS_AGO = re.compile(r"(\d+)\s*hours?\s*ago", re.IGNORECASE)


def _parse_timestamp(value: str) -> Optional[datetime]:
    ts = value.strip()
    if ts.endswith("Z"):
        ts = ts[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(ts)
    except ValueError:
        return None


def normalize_time(expression: Optional[str], now: datetime) -> datetime:
    """Resolve ``expression`` relative to ``now``.

    Accepts "now", ISO 8601 strings, and "<N> minutes ago" / "<N> hours ago".
    Anything else resolves to ``now``; this function never raises.
    """

    if not expression:
        return now
    text = expression.strip()
    if text.lower() == "now":
        return now

    parsed = _parse_timestamp(text)
    if parsed is not None:
        if parsed.tzinfo is None and now.tzinfo is not None:
            parsed = parsed.replace(tzinfo=now.tzinfo)
        elif parsed.tzinfo is not None and now.tzinfo is None:
            parsed = parsed.replace(tzinfo=None) - (parsed.utcoffset() or timedelta(0))
        return parsed

    try:
        minutes = _MINUTES_AGO.search(text)
        if minutes:
            return now - timedelta(minutes=int(minutes.group(1)))

        hours = _HOURS_AGO.search(text)
        if hours:
            return now - timedelta(hours=int(hours.group(1)))
    except OverflowError:
        # "99999999 hours ago" and friends
        return now

    return now
