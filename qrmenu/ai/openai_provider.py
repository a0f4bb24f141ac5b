from __future__ import annotations

from typing import Any, Optional

import httpx

from qrmenu.ai.base import ChatMessage
from qrmenu.ai.transport import post_json
from qrmenu.core.config import AI_TIMEOUT_SECONDS, OPENAI_API_KEY, OPENAI_BASE_URL, OPENAI_MODEL
from qrmenu.core.errors import ProviderAuthError, ProviderResponseError


class OpenAIProvider:
    name = "openai"

    def __init__(
        self,
        api_key: str = OPENAI_API_KEY,
        *,
        model: str = OPENAI_MODEL,
        base_url: str = OPENAI_BASE_URL,
        timeout: float = AI_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _complete(self, payload: dict[str, Any]) -> str:
        if not self.api_key:
            raise ProviderAuthError("OPENAI_API_KEY is not configured")
        body = post_json(
            self.name,
            f"{self.base_url}/chat/completions",
            headers={"Authorization": f"Bearer {self.api_key}"},
            payload={"model": self.model, **payload},
            timeout=self.timeout,
            transport=self.transport,
        )
        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderResponseError("openai response has no choices") from exc
        if not isinstance(content, str) or not content.strip():
            raise ProviderResponseError("openai returned empty content")
        return content

    def complete_json(self, *, system_prompt: str, user_prompt: str) -> str:
        return self._complete(
            {
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "response_format": {"type": "json_object"},
            }
        )

    def chat(self, *, system_prompt: str, messages: list[ChatMessage], max_tokens: int) -> str:
        return self._complete(
            {
                "messages": [{"role": "system", "content": system_prompt}, *messages],
                "max_tokens": max_tokens,
            }
        )
