"""Application configuration utilities."""
from __future__ import annotations

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class AIProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


DEFAULT_AI_PROVIDER = AIProvider.OPENAI

_ENV_OVERRIDES = {
    "AI_PROVIDER": "ai_provider",
    "OPENAI_API_KEY": "openai_api_key",
    "OPENAI_MODEL": "openai_model",
    "ANTHROPIC_API_KEY": "anthropic_api_key",
    "ANTHROPIC_MODEL": "anthropic_model",
    "ANTHROPIC_INSIGHTS_MODEL": "anthropic_insights_model",
    "BABYLOG_DATABASE_PATH": "database_path",
    "BABYLOG_JWT_SECRET": "jwt_secret",
    "BABYLOG_JWT_AUDIENCE": "jwt_audience",
    "LOG_LEVEL": "log_level",
}


class AppConfig(BaseModel):
    """Strongly typed configuration loaded from config.json and the environment."""

    ai_provider: AIProvider = Field(default=DEFAULT_AI_PROVIDER)
    openai_api_key: Optional[str] = Field(default=None)
    openai_model: str = Field(default="gpt-4o-mini")
    anthropic_api_key: Optional[str] = Field(default=None)
    anthropic_model: str = Field(default="claude-3-haiku-20240307")
    anthropic_insights_model: str = Field(default="claude-3-5-sonnet-latest")
    database_path: str = Field(default="./data/babylog.db")
    jwt_secret: Optional[str] = Field(default=None)
    jwt_audience: Optional[str] = Field(default=None)
    log_level: str = Field(default="INFO")

    @property
    def resolved_database_path(self) -> Path:
        """Return the absolute path for the SQLite database file."""
        path = Path(self.database_path)
        if path.is_absolute():
            return path
        return (Path(__file__).resolve().parents[1] / path).resolve()


def _config_path() -> Path:
    return Path(__file__).resolve().parents[1] / "config.json"


def resolve_provider(value: Optional[str]) -> AIProvider:
    """Map a provider name to the enum, falling back to the default for unknown names."""

    if not value:
        return DEFAULT_AI_PROVIDER
    try:
        return AIProvider(value.strip().lower())
    except ValueError:
        logger.warning("Unknown AI provider %r, using %s", value, DEFAULT_AI_PROVIDER.value)
        return DEFAULT_AI_PROVIDER


def load_config(environ: Optional[Dict[str, str]] = None) -> AppConfig:
    """Load config.json when present, then apply environment overrides."""

    environ = os.environ if environ is None else environ
    contents: Dict[str, Any] = {}
    config_file = _config_path()
    if config_file.exists():
        contents = json.loads(config_file.read_text())

    for env_name, key in _ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            contents[key] = value

    contents["ai_provider"] = resolve_provider(contents.get("ai_provider"))
    return AppConfig(**contents)


CONFIG = load_config()
