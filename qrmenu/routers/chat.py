from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from qrmenu.ai.base import TextProvider
from qrmenu.ai.service import get_chat_provider
from qrmenu.deps import get_storage
from qrmenu.schemas.chat import ChatReply
from qrmenu.schemas.validation import validate_chat_request
from qrmenu.services.chat import answer_menu_question
from qrmenu.services.storage import Storage

router = APIRouter(prefix="/api/restaurants", tags=["chat"])


@router.post("/{restaurant_id}/chat", response_model=ChatReply)
def chat_with_menu(
    restaurant_id: int,
    payload: dict[str, Any] = Body(...),
    storage: Storage = Depends(get_storage),
    provider: TextProvider = Depends(get_chat_provider),
):
    request = validate_chat_request(payload)
    return answer_menu_question(storage, provider, restaurant_id, request)
