import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException

from ..auth import AuthContext, get_auth_context, require_baby_access
from ..logs import LogStore
from ..providers import create_transcript_parser
from ..schemas import VoiceRequest, VoiceResponse
from ..voice import UNRECOGNIZED_ACTIVITY_MESSAGE, UnrecognizedActivityError, VoiceService

router = APIRouter(prefix="/api/v1", tags=["voice"])
logger = logging.getLogger(__name__)


def get_voice_service() -> VoiceService:
    return VoiceService(parser=create_transcript_parser(), log_store=LogStore())


@router.post("/voice", response_model=VoiceResponse, status_code=201)
async def ingest_voice(
    payload: VoiceRequest,
    auth: AuthContext = Depends(get_auth_context),
    service: VoiceService = Depends(get_voice_service),
) -> VoiceResponse:
    """Classify a voice transcript and store it as a log for the baby."""

    if not payload.transcript or not payload.transcript.strip() or not payload.baby_id:
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: transcript and babyId",
        )
    require_baby_access(payload.baby_id, auth)

    try:
        result = await asyncio.to_thread(service.ingest, payload.baby_id, payload.transcript)
    except UnrecognizedActivityError as exc:
        logger.info(
            "voice input not recognized",
            extra={"baby_id": payload.baby_id, "reason": exc.reason},
        )
        raise HTTPException(
            status_code=400,
            detail=f"{exc.code}: {UNRECOGNIZED_ACTIVITY_MESSAGE}",
        ) from exc
    except Exception as exc:
        logger.exception("Voice processing error", exc_info=exc)
        raise HTTPException(status_code=500, detail="Failed to process voice input") from exc

    return VoiceResponse(log=result.log, parsed=result.parsed)
