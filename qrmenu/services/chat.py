from __future__ import annotations

import logging

from qrmenu.ai.base import ChatMessage, TextProvider
from qrmenu.core.errors import NotFoundError
from qrmenu.core.request_context import set_request_context
from qrmenu.models.restaurant import Restaurant
from qrmenu.schemas.chat import ChatReply, ChatRequest
from qrmenu.services.availability import build_menu_context
from qrmenu.services.storage import Storage

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 10
CHAT_MAX_TOKENS = 500


def build_chat_system_prompt(restaurant: Restaurant, menu_context: str) -> str:
    intro = f'You are a friendly, knowledgeable AI assistant for "{restaurant.name}"'
    if restaurant.cuisine_type:
        intro += f", a {restaurant.cuisine_type} restaurant"
    if restaurant.address:
        intro += f" located at {restaurant.address}"
    about = f"About: {restaurant.description}" if restaurant.description else ""
    return f"""{intro}.
{about}

Here is the current menu:
{menu_context or "(no dishes are available right now)"}

Your role:
- Help customers explore the menu, answer questions about dishes, ingredients, and prices
- Make personalized recommendations based on preferences (spicy, vegetarian, budget, etc.)
- Be warm, helpful, and enthusiastic about the food
- If asked about allergens or dietary info, share what you can infer from descriptions but always recommend asking staff for confirmation
- Keep responses concise (2-4 sentences) unless the customer asks for detail
- Always mention actual dish names and prices from the menu
- If asked about something not on the menu, politely say so and suggest alternatives
- Never make up dishes that aren't on the menu
- You can use food emojis sparingly to be friendly
- All prices are in AED"""


def build_chat_messages(request: ChatRequest) -> list[ChatMessage]:
    messages: list[ChatMessage] = [
        {"role": turn.role, "content": turn.content} for turn in request.history[-HISTORY_LIMIT:]
    ]
    messages.append({"role": "user", "content": request.message})
    return messages


def answer_menu_question(
    storage: Storage,
    provider: TextProvider,
    restaurant_id: int,
    request: ChatRequest,
) -> ChatReply:
    restaurant = storage.get_restaurant_by_id(restaurant_id)
    if restaurant is None:
        raise NotFoundError("Restaurant not found")
    set_request_context(restaurant_id=str(restaurant.id))

    menu_context = build_menu_context(storage.list_menus_by_restaurant(restaurant_id))
    reply = provider.chat(
        system_prompt=build_chat_system_prompt(restaurant, menu_context),
        messages=build_chat_messages(request),
        max_tokens=CHAT_MAX_TOKENS,
    )
    logger.info(
        "chat reply restaurant_id=%s provider=%s history=%s",
        restaurant_id,
        provider.name,
        len(request.history),
        extra={"restaurant_id": restaurant_id, "provider": provider.name},
    )
    return ChatReply(reply=reply.strip())
