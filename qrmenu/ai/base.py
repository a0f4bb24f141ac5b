from __future__ import annotations

from typing import Protocol, TypedDict


class ChatMessage(TypedDict):
    role: str
    content: str


class TextProvider(Protocol):
    name: str

    def complete_json(self, *, system_prompt: str, user_prompt: str) -> str:
        """Return the raw text of a completion that is expected to be a JSON object."""
        ...

    def chat(self, *, system_prompt: str, messages: list[ChatMessage], max_tokens: int) -> str:
        ...
