"""Pydantic schemas shared across the API."""
from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class LogType(str, Enum):
    FEEDING = "FEEDING"
    SLEEP = "SLEEP"
    DIAPER = "DIAPER"
    NOTE = "NOTE"


class ParsedLogType(str, Enum):
    """Classifier outcome. REJECT never reaches a stored log."""

    FEEDING = "FEEDING"
    SLEEP = "SLEEP"
    DIAPER = "DIAPER"
    NOTE = "NOTE"
    REJECT = "REJECT"


QUANTIFIED_TYPES = {ParsedLogType.FEEDING, ParsedLogType.SLEEP, ParsedLogType.DIAPER}

MetadataValue = Union[bool, int, float, str]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def as_utc(value: datetime) -> datetime:
    """Naive timestamps are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _check_time_order(start: Optional[datetime], end: Optional[datetime]) -> None:
    if start is not None and end is not None and as_utc(end) < as_utc(start):
        raise ValueError("endTime must not be earlier than startTime")


class Baby(CamelModel):
    id: str
    name: str
    birth_date: date
    created_at: datetime
    updated_at: datetime


class CreateBabyPayload(CamelModel):
    name: Optional[str] = None
    birth_date: Optional[date] = None


class UpdateBabyPayload(CamelModel):
    name: Optional[str] = None
    birth_date: Optional[date] = None


class Log(CamelModel):
    id: str
    baby_id: str
    type: LogType
    start_time: datetime
    end_time: Optional[datetime] = None
    amount: Optional[float] = None
    unit: Optional[str] = None
    raw_transcript: str
    notes: Optional[str] = None
    metadata: Optional[Dict[str, MetadataValue]] = None
    created_at: datetime
    updated_at: datetime


class CreateLogPayload(CamelModel):
    baby_id: str
    type: LogType
    start_time: datetime
    end_time: Optional[datetime] = None
    amount: Optional[float] = None
    unit: Optional[str] = None
    raw_transcript: str = Field(default="", description="Original voice transcript, empty for manual entries")
    notes: Optional[str] = None
    metadata: Optional[Dict[str, MetadataValue]] = None

    @model_validator(mode="after")
    def _end_after_start(self) -> "CreateLogPayload":
        _check_time_order(self.start_time, self.end_time)
        return self


class UpdateLogPayload(CamelModel):
    type: Optional[LogType] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    amount: Optional[float] = None
    unit: Optional[str] = None
    notes: Optional[str] = None
    metadata: Optional[Dict[str, MetadataValue]] = None

    @model_validator(mode="after")
    def _end_after_start(self) -> "UpdateLogPayload":
        _check_time_order(self.start_time, self.end_time)
        return self


class ParsedLog(CamelModel):
    type: ParsedLogType
    start_time: str = Field(default="now", description="Free-form time expression, normalized later")
    end_time: Optional[str] = None
    amount: Optional[float] = None
    unit: Optional[str] = None
    notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)


class ParsedSummary(CamelModel):
    type: LogType
    confidence: float


class VoiceRequest(CamelModel):
    baby_id: Optional[str] = Field(default=None, description="Target baby id")
    transcript: Optional[str] = Field(default=None, description="Voice-to-text transcript")


class VoiceResponse(CamelModel):
    log: Log
    parsed: ParsedSummary


class WeeklyInsights(CamelModel):
    summary: str
    patterns: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
