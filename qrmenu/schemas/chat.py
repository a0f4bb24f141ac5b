from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator

from qrmenu.schemas.common import CamelModel, require_text


class ChatTurn(CamelModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(CamelModel):
    message: str
    history: list[ChatTurn] = Field(default_factory=list)

    @field_validator("message", mode="before")
    @classmethod
    def validate_message(cls, value: Any) -> Any:
        return require_text(value, "Message")

    @field_validator("history", mode="before")
    @classmethod
    def default_history(cls, value: Any) -> Any:
        return [] if value is None else value


class ChatReply(CamelModel):
    reply: str
