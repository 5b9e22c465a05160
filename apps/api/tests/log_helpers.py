from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Dict, List, Optional
from uuid import uuid4

import httpx
import jwt
from openai import APIConnectionError

from babylog.schemas import CreateLogPayload, Log, ParsedLog

TEST_JWT_SECRET = "test-secret"
FROZEN_NOW = datetime(2025, 3, 12, 15, 30, tzinfo=timezone.utc)


def auth_headers(user_id: str, email: Optional[str] = None) -> Dict[str, str]:
    claims = {"sub": user_id}
    if email:
        claims["email"] = email
    token = jwt.encode(claims, TEST_JWT_SECRET, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


class FakeParser:
    def __init__(self, result: Optional[ParsedLog] = None) -> None:
        self.result = result
        self.calls: List[str] = []

    def parse(self, transcript: str) -> ParsedLog:
        self.calls.append(transcript)
        if self.result is None:
            raise AssertionError("parser should not have been called")
        return self.result


class InMemoryLogStore:
    def __init__(self) -> None:
        self.created: List[Log] = []

    def create_log(self, payload: CreateLogPayload) -> Log:
        now = datetime.now(tz=timezone.utc)
        log = Log(
            id=str(uuid4()),
            created_at=now,
            updated_at=now,
            **payload.model_dump(),
        )
        self.created.append(log)
        return log


class FailingLogStore:
    def create_log(self, payload: CreateLogPayload) -> Log:
        raise RuntimeError("database unavailable")


class FakeCompletions:
    def __init__(self, content=None, error: Optional[Exception] = None) -> None:
        self.content = content
        self.error = error
        self.calls: List[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))])


def fake_openai(content=None, error: Optional[Exception] = None):
    completions = FakeCompletions(content, error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def openai_connection_error() -> APIConnectionError:
    return APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
