"""OpenAI integration for classifying transcripts and summarizing weeks."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

from .config import CONFIG
from .parser import (
    INSIGHTS_SYSTEM_PROMPT,
    JSON_ONLY_SUFFIX,
    PARSER_SYSTEM_PROMPT,
    coerce_insights,
    coerce_parsed_log,
    extract_json_object,
    fallback_insights,
    fallback_parsed_log,
    format_log_lines,
)
from .schemas import Log, ParsedLog, ParsedLogType, WeeklyInsights

logger = logging.getLogger(__name__)

_LOG_TYPE_ALIASES = {
    "feed": ParsedLogType.FEEDING,
    "feeding": ParsedLogType.FEEDING,
    "bottle": ParsedLogType.FEEDING,
    "formula": ParsedLogType.FEEDING,
    "nurse": ParsedLogType.FEEDING,
    "nursing": ParsedLogType.FEEDING,
    "breast": ParsedLogType.FEEDING,
    "nap": ParsedLogType.SLEEP,
    "bedtime": ParsedLogType.SLEEP,
    "wet": ParsedLogType.DIAPER,
    "dirty": ParsedLogType.DIAPER,
    "poop": ParsedLogType.DIAPER,
}


@lru_cache
def get_client() -> OpenAI:
    # Raises OpenAIError when no key is configured; callers treat that as a provider failure.
    return OpenAI(api_key=CONFIG.openai_api_key)


def normalize_log_type(raw_type: Any) -> ParsedLogType:
    """The schema constrains ``type`` to the enum; aliases cover non-strict replies."""
    value = str(raw_type or "").strip()
    try:
        return ParsedLogType(value.upper())
    except ValueError:
        return _LOG_TYPE_ALIASES.get(value.lower(), ParsedLogType.NOTE)


def _nullable(kind: str) -> Dict[str, Any]:
    return {"type": [kind, "null"]}


def _log_json_schema() -> Dict[str, Any]:
    return {
        "name": "baby_log",
        "schema": {
            "type": "object",
            "properties": {
                "type": {
                    "type": "string",
                    "enum": [value.value for value in ParsedLogType],
                },
                "startTime": _nullable("string"),
                "endTime": _nullable("string"),
                "amount": _nullable("number"),
                "unit": _nullable("string"),
                "notes": _nullable("string"),
                "confidence": {"type": "number", "minimum": 0, "maximum": 1},
                "rejectionReason": _nullable("string"),
            },
            "required": [
                "type",
                "startTime",
                "endTime",
                "amount",
                "unit",
                "notes",
                "confidence",
                "rejectionReason",
            ],
            "additionalProperties": False,
        },
    }


def _insights_json_schema() -> Dict[str, Any]:
    return {
        "name": "weekly_insights",
        "schema": {
            "type": "object",
            "properties": {
                "summary": {"type": "string"},
                "patterns": {"type": "array", "items": {"type": "string"}},
                "suggestions": {"type": "array", "items": {"type": "string"}},
            },
            "required": ["summary", "patterns", "suggestions"],
            "additionalProperties": False,
        },
    }


def _message_text(response: Any) -> str:
    raw_content = response.choices[0].message.content or ""
    if isinstance(raw_content, str):
        return raw_content
    chunks = []
    for part in raw_content:
        text = getattr(part, "text", None)
        if text is None and isinstance(part, dict):
            text = part.get("text")
        if text:
            chunks.append(text)
    return "".join(chunks)


class OpenAIChatClient:
    """Shared chat-completions call returning the decoded JSON object or None."""

    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None) -> None:
        self._client = client
        self.model = model or CONFIG.openai_model

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = get_client()
        return self._client

    def _complete_json(
        self,
        messages: List[Dict[str, str]],
        json_schema: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=0.2,
                response_format={"type": "json_schema", "json_schema": json_schema},
            )
        except OpenAIError as exc:
            logger.exception("OpenAI chat API failed, using fallback", exc_info=exc)
            return None

        try:
            content = _message_text(response)
        except (AttributeError, IndexError, KeyError, TypeError) as exc:
            logger.exception("Unexpected OpenAI response format, using fallback", exc_info=exc)
            return None

        payload = extract_json_object(content.strip().strip("`"))
        if payload is None:
            logger.warning("OpenAI response had no JSON object", extra={"content": content[:200]})
        return payload


class OpenAITranscriptParser(OpenAIChatClient):
    def parse(self, transcript: str) -> ParsedLog:
        payload = self._complete_json(
            [
                {"role": "system", "content": PARSER_SYSTEM_PROMPT + JSON_ONLY_SUFFIX},
                {"role": "user", "content": transcript},
            ],
            _log_json_schema(),
        )
        if payload is None:
            return fallback_parsed_log(transcript)
        try:
            parsed = coerce_parsed_log(payload, normalize_log_type)
        except ValidationError as exc:
            logger.warning("Parsed log failed validation, using fallback", extra={"error": str(exc)})
            return fallback_parsed_log(transcript)
        logger.info(
            "OpenAI parsed transcript",
            extra={"type": parsed.type.value, "confidence": parsed.confidence},
        )
        return parsed


class OpenAIInsightGenerator(OpenAIChatClient):
    def generate(self, baby_name: str, logs: List[Log]) -> WeeklyInsights:
        payload = self._complete_json(
            [
                {"role": "system", "content": INSIGHTS_SYSTEM_PROMPT + JSON_ONLY_SUFFIX},
                {"role": "user", "content": f"Baby: {baby_name}\n\nLogs:\n{format_log_lines(logs)}"},
            ],
            _insights_json_schema(),
        )
        if payload is None:
            return fallback_insights()
        return coerce_insights(payload)
