from __future__ import annotations

from typing import Optional

import httpx

from qrmenu.ai.base import ChatMessage
from qrmenu.ai.transport import post_json
from qrmenu.core.config import AI_TIMEOUT_SECONDS, ANTHROPIC_API_KEY, ANTHROPIC_BASE_URL, ANTHROPIC_MODEL
from qrmenu.core.errors import ProviderAuthError, ProviderResponseError

ANTHROPIC_VERSION = "2023-06-01"
JSON_MAX_TOKENS = 4096


class AnthropicProvider:
    name = "anthropic"

    def __init__(
        self,
        api_key: str = ANTHROPIC_API_KEY,
        *,
        model: str = ANTHROPIC_MODEL,
        base_url: str = ANTHROPIC_BASE_URL,
        timeout: float = AI_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _messages(self, *, system_prompt: str, messages: list[ChatMessage], max_tokens: int) -> str:
        if not self.api_key:
            raise ProviderAuthError("ANTHROPIC_API_KEY is not configured")
        body = post_json(
            self.name,
            f"{self.base_url}/messages",
            headers={"x-api-key": self.api_key, "anthropic-version": ANTHROPIC_VERSION},
            payload={
                "model": self.model,
                "max_tokens": max_tokens,
                "system": system_prompt,
                "messages": list(messages),
            },
            timeout=self.timeout,
            transport=self.transport,
        )
        blocks = body.get("content")
        if not isinstance(blocks, list):
            raise ProviderResponseError("anthropic response has no content")
        text = "".join(
            block.get("text", "") for block in blocks if isinstance(block, dict) and block.get("type") == "text"
        )
        if not text.strip():
            raise ProviderResponseError("anthropic returned empty content")
        return text

    def complete_json(self, *, system_prompt: str, user_prompt: str) -> str:
        return self._messages(
            system_prompt=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            max_tokens=JSON_MAX_TOKENS,
        )

    def chat(self, *, system_prompt: str, messages: list[ChatMessage], max_tokens: int) -> str:
        return self._messages(system_prompt=system_prompt, messages=messages, max_tokens=max_tokens)
