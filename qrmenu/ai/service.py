from __future__ import annotations

import logging

from qrmenu.ai.anthropic_provider import AnthropicProvider
from qrmenu.ai.base import TextProvider
from qrmenu.ai.mock_provider import MockProvider
from qrmenu.ai.openai_provider import OpenAIProvider
from qrmenu.core.config import AI_PROVIDER, CHAT_PROVIDER

logger = logging.getLogger(__name__)


def build_provider(name: str) -> TextProvider:
    normalized = (name or "mock").strip().lower()
    if normalized == "openai":
        return OpenAIProvider()
    if normalized == "anthropic":
        return AnthropicProvider()
    if normalized != "mock":
        logger.warning("Unknown provider %r, falling back to mock", name)
    return MockProvider()


def get_generation_provider() -> TextProvider:
    return build_provider(AI_PROVIDER)


def get_chat_provider() -> TextProvider:
    return build_provider(CHAT_PROVIDER)
