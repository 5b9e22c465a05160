import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from ..auth import AuthContext, get_auth_context, require_baby_access
from ..logs import create_log, delete_log, find_log, list_logs, list_logs_by_type, update_log
from ..schemas import CreateLogPayload, Log, LogType, UpdateLogPayload

router = APIRouter(prefix="/api/v1", tags=["logs"])
logger = logging.getLogger(__name__)


def _owned_log(log_id: str, auth: AuthContext) -> Log:
    log = find_log(log_id)
    if log is None:
        raise HTTPException(status_code=404, detail="Log not found")
    require_baby_access(log.baby_id, auth)
    return log


@router.get("/logs", response_model=List[Log])
async def list_logs_endpoint(
    baby_id: Optional[str] = Query(None, alias="babyId", description="Baby identifier"),
    start_date: Optional[datetime] = Query(None, alias="startDate", description="Start of range"),
    end_date: Optional[datetime] = Query(None, alias="endDate", description="End of range"),
    log_type: Optional[LogType] = Query(None, alias="type", description="Only logs of this type"),
    auth: AuthContext = Depends(get_auth_context),
) -> List[Log]:
    """Return logs for the baby, newest first, optionally limited to a date window."""

    if not baby_id:
        raise HTTPException(status_code=400, detail="Missing required query param: babyId")
    require_baby_access(baby_id, auth)
    if log_type is not None:
        logs = list_logs_by_type(baby_id, log_type, start_date, end_date)
    else:
        logs = list_logs(baby_id, start_date, end_date)
    logger.info(
        "logs query",
        extra={
            "baby_id": baby_id,
            "start": start_date.isoformat() if start_date else None,
            "end": end_date.isoformat() if end_date else None,
            "type": log_type.value if log_type else None,
            "count": len(logs),
        },
    )
    return logs


@router.post("/logs", response_model=Log, status_code=201)
async def create_log_endpoint(
    payload: CreateLogPayload,
    auth: AuthContext = Depends(get_auth_context),
) -> Log:
    require_baby_access(payload.baby_id, auth)
    return create_log(payload)


@router.get("/logs/{log_id}", response_model=Log)
async def get_log_endpoint(log_id: str, auth: AuthContext = Depends(get_auth_context)) -> Log:
    return _owned_log(log_id, auth)


@router.patch("/logs/{log_id}", response_model=Log)
async def update_log_endpoint(
    log_id: str,
    payload: UpdateLogPayload,
    auth: AuthContext = Depends(get_auth_context),
) -> Log:
    _owned_log(log_id, auth)
    try:
        return update_log(log_id, payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.delete("/logs/{log_id}", status_code=204)
async def delete_log_endpoint(log_id: str, auth: AuthContext = Depends(get_auth_context)) -> Response:
    _owned_log(log_id, auth)
    try:
        delete_log(log_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=204)
