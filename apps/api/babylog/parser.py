"""Provider-neutral pieces of transcript parsing and weekly insight generation."""
from __future__ import annotations

import json
import math
import re
from typing import Any, Callable, Dict, Iterable, Optional, Protocol

from .schemas import Log, ParsedLog, ParsedLogType, WeeklyInsights

FALLBACK_CONFIDENCE = 0.1
DEFAULT_CONFIDENCE = 0.5
INSIGHTS_UNAVAILABLE = "Unable to generate insights at this time."

PARSER_SYSTEM_PROMPT = """
You are a baby log parser. Parents dictate short voice notes about their baby; turn each one into JSON.

Fields:
- type: FEEDING (bottle, formula, breast, solid food), SLEEP (nap, night sleep), DIAPER (wet, dirty, change), NOTE (any other observation about the baby), REJECT (nonsense or unrelated to baby care)
- startTime: ISO 8601 timestamp or a relative expression like "now", "5 minutes ago", "2 hours ago"
- endTime: optional ISO 8601 timestamp or relative expression
- amount: numeric value if mentioned (ounces, millilitres, minutes, hours, number of diapers)
- unit: oz, ml, minutes, hours
- notes: additional details in the parent's words
- confidence: 0-1 based on certainty
- rejectionReason: if REJECT, explain why

Rules:
1. Gibberish, random unrelated words, or questions unrelated to baby care ("xyz abc 123", "blah blah", "what's the weather") are REJECT with confidence 0.1.
2. A clear baby activity with specific details (amount, time) gets confidence 0.8-1.0.
3. A valid baby note without specific details is NOTE with confidence 0.6-0.8.
4. When no time is mentioned, startTime is "now".
"""

INSIGHTS_SYSTEM_PROMPT = (
    "You are a pediatric advice assistant. Analyze this week's baby logs and provide practical, "
    "evidence-based insights. Return JSON with a 2-3 sentence \"summary\", a list of \"patterns\" "
    "and a list of \"suggestions\"."
)

JSON_ONLY_SUFFIX = "\nReturn ONLY a single JSON object. Do not wrap it in markdown fences."

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class TranscriptParser(Protocol):
    def parse(self, transcript: str) -> ParsedLog:
        ...


class InsightGenerator(Protocol):
    def generate(self, baby_name: str, logs: list[Log]) -> WeeklyInsights:
        ...


def fallback_parsed_log(transcript: str) -> ParsedLog:
    return ParsedLog(
        type=ParsedLogType.NOTE,
        start_time="now",
        confidence=FALLBACK_CONFIDENCE,
        notes=transcript,
    )


def fallback_insights() -> WeeklyInsights:
    return WeeklyInsights(summary=INSIGHTS_UNAVAILABLE, patterns=[], suggestions=[])


def extract_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Return the outermost JSON object embedded in ``text``, if any."""
    if not text:
        return None
    match = _JSON_OBJECT.search(text)
    if not match:
        return None
    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return payload if isinstance(payload, dict) else None


def synonym_log_type(raw_type: Any) -> ParsedLogType:
    """Map free-text classifier output onto the log type enum."""
    value = str(raw_type or "").strip().lower()
    if "reject" in value:
        return ParsedLogType.REJECT
    if any(word in value for word in ("feed", "formula", "bottle", "nurs", "breast", "solid")):
        return ParsedLogType.FEEDING
    if any(word in value for word in ("sleep", "nap", "bed")):
        return ParsedLogType.SLEEP
    if any(word in value for word in ("diaper", "wet", "dirty", "poop", "pee")):
        return ParsedLogType.DIAPER
    return ParsedLogType.NOTE


def _coerce_amount(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, OverflowError, ValueError):
        return None
    return amount if math.isfinite(amount) else None


def _coerce_confidence(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return DEFAULT_CONFIDENCE
    try:
        confidence = float(value)
    except (TypeError, OverflowError, ValueError):
        return DEFAULT_CONFIDENCE
    if not math.isfinite(confidence):
        return DEFAULT_CONFIDENCE
    return min(max(confidence, 0.0), 1.0)


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def coerce_parsed_log(
    payload: Dict[str, Any],
    normalize_type: Callable[[Any], ParsedLogType],
) -> ParsedLog:
    return ParsedLog(
        type=normalize_type(payload.get("type")),
        start_time=_optional_text(payload.get("startTime")) or "now",
        end_time=_optional_text(payload.get("endTime")),
        amount=_coerce_amount(payload.get("amount")),
        unit=_optional_text(payload.get("unit")),
        notes=_optional_text(payload.get("notes")),
        rejection_reason=_optional_text(payload.get("rejectionReason")),
        confidence=_coerce_confidence(payload.get("confidence")),
    )


def coerce_insights(payload: Optional[Dict[str, Any]]) -> WeeklyInsights:
    if not payload or not isinstance(payload.get("summary"), str):
        return fallback_insights()

    def _strings(values: Any) -> list[str]:
        if not isinstance(values, list):
            return []
        return [str(item) for item in values if item]

    return WeeklyInsights(
        summary=payload["summary"],
        patterns=_strings(payload.get("patterns")),
        suggestions=_strings(payload.get("suggestions")),
    )


def format_log_lines(logs: Iterable[Log]) -> str:
    lines = []
    for log in logs:
        line = f"- {log.type.value} at {log.start_time.isoformat()}"
        if log.amount:
            line += f", {log.amount:g}{log.unit or ''}"
        if log.notes:
            line += f": {log.notes}"
        lines.append(line)
    return "\n".join(lines)
