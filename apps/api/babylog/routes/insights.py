import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth import AuthContext, get_auth_context, require_baby_access
from ..insight_engine import get_weekly_insights, week_offset_from_iso, week_window
from ..logs import list_logs
from ..parser import InsightGenerator
from ..providers import create_insight_generator
from ..schemas import WeeklyInsights

router = APIRouter(prefix="/api/v1", tags=["insights"])
logger = logging.getLogger(__name__)


def get_insight_generator() -> InsightGenerator:
    return create_insight_generator()


@router.get("/insights", response_model=WeeklyInsights)
async def weekly_insights_endpoint(
    baby_id: Optional[str] = Query(None, alias="babyId", description="Baby identifier"),
    week: Optional[str] = Query(None, description="ISO week, e.g. 2024-W05"),
    auth: AuthContext = Depends(get_auth_context),
    generator: InsightGenerator = Depends(get_insight_generator),
) -> WeeklyInsights:
    """Summarize one week of logs for the baby, defaulting to the current week."""

    if not baby_id:
        raise HTTPException(status_code=400, detail="Missing required query param: babyId")
    baby = require_baby_access(baby_id, auth)

    now = datetime.now(tz=timezone.utc)
    try:
        week_offset = week_offset_from_iso(week, now.date())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    start, end = week_window(now, week_offset)
    logs = list_logs(baby_id, start, end, end_exclusive=True, newest_first=False)
    logger.info(
        "weekly insights request",
        extra={"baby_id": baby_id, "week_offset": week_offset, "count": len(logs)},
    )
    return await asyncio.to_thread(get_weekly_insights, baby, logs, generator)
