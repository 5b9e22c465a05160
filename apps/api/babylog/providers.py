"""Pick the configured AI provider once and build its parser / insight generator."""
from __future__ import annotations

from typing import Optional

from .anthropic_client import AnthropicInsightGenerator, AnthropicTranscriptParser
from .config import CONFIG, AIProvider
from .openai_client import OpenAIInsightGenerator, OpenAITranscriptParser
from .parser import InsightGenerator, TranscriptParser


def create_transcript_parser(provider: Optional[AIProvider] = None) -> TranscriptParser:
    provider = provider or CONFIG.ai_provider
    if provider == AIProvider.ANTHROPIC:
        return AnthropicTranscriptParser()
    return OpenAITranscriptParser()


def create_insight_generator(provider: Optional[AIProvider] = None) -> InsightGenerator:
    provider = provider or CONFIG.ai_provider
    if provider == AIProvider.ANTHROPIC:
        return AnthropicInsightGenerator()
    return OpenAIInsightGenerator()
