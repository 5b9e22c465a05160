"""Voice transcript ingestion: keyword screen, classify, accept/reject, persist."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from .parser import TranscriptParser
from .policy import UNRECOGNIZED_ACTIVITY, contains_care_keyword, decide
from .schemas import CreateLogPayload, Log, LogType, ParsedLog, ParsedSummary, as_utc
from .time_normalizer import normalize_time

logger = logging.getLogger(__name__)

UNRECOGNIZED_ACTIVITY_MESSAGE = (
    "Could not recognize this as a baby activity. "
    'Try saying things like "Baby ate 4 oz" or "Baby slept for 2 hours".'
)


class UnrecognizedActivityError(ValueError):
    code = UNRECOGNIZED_ACTIVITY

    def __init__(self, reason: str = UNRECOGNIZED_ACTIVITY) -> None:
        super().__init__(UNRECOGNIZED_ACTIVITY)
        self.reason = reason


class LogWriter(Protocol):
    def create_log(self, payload: CreateLogPayload) -> Log:
        ...


@dataclass
class VoiceResult:
    log: Log
    parsed: ParsedSummary


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def build_log_payload(
    baby_id: str,
    transcript: str,
    parsed: ParsedLog,
    now: datetime,
) -> CreateLogPayload:
    start_time = normalize_time(parsed.start_time, now)
    end_time = normalize_time(parsed.end_time, now) if parsed.end_time else None
    if end_time is not None and as_utc(end_time) < as_utc(start_time):
        logger.info("dropping end time earlier than start", extra={"baby_id": baby_id})
        end_time = None
    return CreateLogPayload(
        baby_id=baby_id,
        type=LogType(parsed.type.value),
        start_time=start_time,
        end_time=end_time,
        amount=parsed.amount,
        unit=parsed.unit,
        raw_transcript=transcript,
        notes=parsed.notes,
    )


class VoiceService:
    def __init__(
        self,
        parser: TranscriptParser,
        log_store: LogWriter,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.parser = parser
        self.log_store = log_store
        self.clock = clock or _utc_now

    def ingest(self, baby_id: str, transcript: str) -> VoiceResult:
        if not baby_id:
            raise ValueError("baby_id is required")
        if not transcript or not transcript.strip():
            raise ValueError("transcript is required")

        if not contains_care_keyword(transcript):
            logger.info("transcript failed keyword screen", extra={"baby_id": baby_id})
            raise UnrecognizedActivityError("no baby-care keywords")

        parsed = self.parser.parse(transcript)
        decision = decide(transcript, parsed)
        if not decision.accepted:
            logger.info(
                "transcript rejected",
                extra={
                    "baby_id": baby_id,
                    "type": parsed.type.value,
                    "confidence": parsed.confidence,
                    "reasons": decision.reasons,
                },
            )
            raise UnrecognizedActivityError("; ".join(decision.reasons))

        payload = build_log_payload(baby_id, transcript, parsed, self.clock())
        log = self.log_store.create_log(payload)
        logger.info(
            "voice log created",
            extra={
                "baby_id": baby_id,
                "log_id": log.id,
                "type": log.type.value,
                "confidence": parsed.confidence,
            },
        )
        return VoiceResult(
            log=log,
            parsed=ParsedSummary(type=log.type, confidence=parsed.confidence),
        )
