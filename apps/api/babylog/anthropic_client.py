"""Anthropic Messages API integration, spoken to directly over httpx."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
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
    synonym_log_type,
)
from .schemas import Log, ParsedLog, WeeklyInsights

logger = logging.getLogger(__name__)

ANTHROPIC_BASE_URL = "https://api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"
MAX_TOKENS = 1024


class AnthropicProviderError(RuntimeError):
    pass


class AnthropicMessagesClient:
    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: str = ANTHROPIC_BASE_URL,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else CONFIG.anthropic_api_key
        self.model = model or CONFIG.anthropic_model
        self.base_url = base_url.rstrip("/")
        self._http_client = http_client

    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            raise AnthropicProviderError("Missing ANTHROPIC_API_KEY.")
        return {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

    def _post(self, body: Dict[str, Any]) -> httpx.Response:
        url = f"{self.base_url}/v1/messages"
        if self._http_client is not None:
            return self._http_client.post(url, json=body, headers=self._headers())
        with httpx.Client(timeout=30.0) as client:
            return client.post(url, json=body, headers=self._headers())

    def complete_text(self, system: str, user_content: str) -> str:
        resp = self._post(
            {
                "model": self.model,
                "max_tokens": MAX_TOKENS,
                "system": system,
                "messages": [{"role": "user", "content": user_content}],
            }
        )
        if resp.status_code >= 400:
            raise AnthropicProviderError(
                f"Anthropic messages failed: status={resp.status_code}, body={resp.text[:200]}"
            )
        data = resp.json()
        if not isinstance(data, dict):
            raise AnthropicProviderError("Anthropic messages returned a non-object body.")
        blocks = data.get("content") or []
        if not isinstance(blocks, list):
            raise AnthropicProviderError("Anthropic messages returned malformed content.")
        return "".join(
            block["text"]
            for block in blocks
            if isinstance(block, dict)
            and block.get("type") == "text"
            and isinstance(block.get("text"), str)
        )

    def complete_json(self, system: str, user_content: str) -> Optional[Dict[str, Any]]:
        try:
            text = self.complete_text(system + JSON_ONLY_SUFFIX, user_content)
        except (httpx.HTTPError, AnthropicProviderError, ValueError) as exc:
            logger.exception("Anthropic call failed, using fallback", exc_info=exc)
            return None
        payload = extract_json_object(text)
        if payload is None:
            logger.warning("Anthropic response had no JSON object", extra={"content": text[:200]})
        return payload


class AnthropicTranscriptParser(AnthropicMessagesClient):
    def parse(self, transcript: str) -> ParsedLog:
        payload = self.complete_json(PARSER_SYSTEM_PROMPT, transcript)
        if payload is None:
            return fallback_parsed_log(transcript)
        try:
            parsed = coerce_parsed_log(payload, synonym_log_type)
        except ValidationError as exc:
            logger.warning("Parsed log failed validation, using fallback", extra={"error": str(exc)})
            return fallback_parsed_log(transcript)
        logger.info(
            "Anthropic parsed transcript",
            extra={"type": parsed.type.value, "confidence": parsed.confidence},
        )
        return parsed


class AnthropicInsightGenerator(AnthropicMessagesClient):
    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("model", CONFIG.anthropic_insights_model)
        super().__init__(**kwargs)

    def generate(self, baby_name: str, logs: List[Log]) -> WeeklyInsights:
        payload = self.complete_json(
            INSIGHTS_SYSTEM_PROMPT,
            f"Baby: {baby_name}\n\nLogs:\n{format_log_lines(logs)}",
        )
        if payload is None:
            return fallback_insights()
        return coerce_insights(payload)
