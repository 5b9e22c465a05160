"""Weekly insight helpers: week windows, local summaries, and LLM summaries."""
from __future__ import annotations

import logging
import re
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Tuple

from .parser import InsightGenerator
from .schemas import Baby, Log, LogType, WeeklyInsights

logger = logging.getLogger(__name__)

_ISO_WEEK = re.compile(r"^(\d{4})-W(\d{1,2})$")


def week_window(now: datetime, week_offset: int = 0) -> Tuple[datetime, datetime]:
    """Sunday-midnight week containing ``now``, shifted back ``week_offset`` weeks.

    The start is inclusive and the end exclusive.
    """

    days_since_sunday = (now.weekday() + 1) % 7
    start = (now - timedelta(days=days_since_sunday + 7 * week_offset)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    return start, start + timedelta(days=7)


def week_offset_from_iso(week: Optional[str], today: date) -> int:
    """Convert ``YYYY-Www`` into a count of weeks before the current one.

    Weeks from another year resolve to the current week.
    """

    if not week:
        return 0
    match = _ISO_WEEK.match(week.strip())
    if not match:
        raise ValueError(f"Invalid week {week!r}; expected YYYY-Www")
    year, week_number = int(match.group(1)), int(match.group(2))
    if not 1 <= week_number <= 53:
        raise ValueError(f"Invalid week number {week_number}")
    if year != today.year:
        return 0
    return today.isocalendar()[1] - week_number


def summaries_from_logs(logs: List[Log]) -> Dict[str, float]:
    totals: Dict[str, float] = defaultdict(float)
    for log in logs:
        totals[f"count_{log.type.value.lower()}"] += 1
        if log.amount is None:
            continue
        if log.type == LogType.FEEDING:
            totals["feeding_amount"] += log.amount
        elif log.type == LogType.SLEEP:
            totals["sleep_amount"] += log.amount
    return dict(totals)


def get_weekly_insights(
    baby: Baby,
    logs: List[Log],
    generator: InsightGenerator,
) -> WeeklyInsights:
    if not logs:
        return WeeklyInsights(
            summary=f"No logs recorded for {baby.name} this week.",
            patterns=["No data available to analyze"],
            suggestions=["Start logging to get personalized insights"],
        )
    logger.info(
        "generating weekly insights",
        extra={"baby_id": baby.id, "count": len(logs), **summaries_from_logs(logs)},
    )
    return generator.generate(baby.name, logs)
