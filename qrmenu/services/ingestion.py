"""AI-assisted menu drafting.

Two producers feed one shape: ``generate_menu_draft`` (cuisine + tone) and
``extract_menu_draft`` (uploaded PDF/DOCX/TXT). Provider output is untrusted:
every item is re-validated and invalid items are dropped and counted.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any

from qrmenu.ai.base import TextProvider
from qrmenu.core.config import MAX_UPLOAD_BYTES
from qrmenu.core.errors import InsufficientContentError, ProviderResponseError, ValidationError
from qrmenu.schemas.ingestion import GenerateMenuRequest, ImportMenuRequest, MenuDraft
from qrmenu.schemas.menus import MenuCreate, MenuWithItems
from qrmenu.schemas.validation import validate_item_draft
from qrmenu.services.file_text import extract_text
from qrmenu.services.storage import Storage

logger = logging.getLogger(__name__)
INGESTION_PREFIX = "[INGESTION]"

MAX_MENU_TEXT_CHARS = 8000
MIN_MENU_TEXT_CHARS = 10
GENERATED_MENU_NAME = "Generated Menu"
UPLOADED_MENU_NAME = "Uploaded Menu"

GENERATION_SYSTEM_PROMPT = (
    "You are a helpful assistant that generates restaurant menus in JSON format. "
    "Always use AED currency for prices."
)
EXTRACTION_SYSTEM_PROMPT = (
    "You are an expert at parsing restaurant menus from raw text. Extract all menu items accurately, "
    "preserving names and prices. Always return valid JSON. Use AED currency."
)

_ITEM_SHAPE = """    {{
      "name": "Item Name",
      "description": "Brief 1-line description{description_hint}",
      "price": "45.00",
      "category": {categories},
      "imageUrl": "https://source.unsplash.com/400x300/?{image_hint}",
      "isBestseller": {flag},
      "isChefsPick": {flag},
      "isTodaysSpecial": {flag}
    }}"""

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def build_generation_prompt(cuisine: str, tone: str) -> str:
    item_shape = _ITEM_SHAPE.format(
        description_hint="",
        categories='"Appetizer" | "Main" | "Dessert" | "Drink"',
        image_hint="spaghetti-carbonara",
        flag="true/false",
    )
    return f"""Generate a menu for a {cuisine} restaurant with about 15 items spread across categories (Appetizer, Main, Dessert, Drink).
The tone should be {tone}.
All prices must be in AED (United Arab Emirates Dirham).
For each item, include an "imageUrl" field with a relevant food image URL using this format:
https://source.unsplash.com/400x300/?FOOD_NAME_HERE (replace spaces with hyphens, use specific food terms).

Return a JSON object with the following structure:
{{
  "name": "Menu Name",
  "description": "Menu Description",
  "items": [
{item_shape}
  ]
}}
Rules: Mark 2-3 items as bestseller, 2 as chef's pick, 1-2 as today's special. Generate around 15 items total. Keep descriptions short (one line). Prices should be realistic in AED (e.g. appetizers 25-55 AED, mains 45-120 AED, desserts 25-50 AED, drinks 15-40 AED).
Make imageUrl specific to each dish - use the dish name in the URL with hyphens.
Do not include any markdown formatting."""


def truncate_menu_text(text: str) -> str:
    return text[:MAX_MENU_TEXT_CHARS]


def build_extraction_prompt(menu_text: str) -> str:
    item_shape = _ITEM_SHAPE.format(
        description_hint=" (infer if not present)",
        categories='"Appetizer" | "Main" | "Dessert" | "Drink" | "Starter" | "Soup" | "Salad" | "Beverage" | "Side"',
        image_hint="FOOD_NAME_HERE",
        flag="false",
    )
    return f"""I have extracted the following text from a restaurant menu file. Please parse it and return a structured JSON menu.

--- EXTRACTED MENU TEXT ---
{menu_text}
--- END ---

Return a JSON object with the following structure:
{{
  "name": "Menu Name (infer from the content or use '{UPLOADED_MENU_NAME}')",
  "description": "Brief description of the menu",
  "items": [
{item_shape}
  ]
}}
Rules:
- Extract ALL items you can find from the text
- All prices must be in AED. If prices are in another currency, convert approximately to AED.
- If no prices are found, estimate reasonable prices in AED
- Categorize items appropriately (Appetizer, Main, Dessert, Drink, etc.)
- Generate a short description if one isn't present in the text
- For imageUrl, use the dish name with hyphens in the Unsplash URL
- Mark 2-3 items as bestseller if they seem popular
- Mark 1-2 as chef's pick
- Do not include any markdown formatting in the response"""


def _load_json_object(raw: str) -> dict[str, Any]:
    text = (raw or "").strip()
    fenced = _FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("%s provider returned invalid JSON: %s", INGESTION_PREFIX, exc)
        raise ProviderResponseError("provider returned invalid JSON") from exc
    if not isinstance(data, dict):
        raise ProviderResponseError("provider JSON is not an object")
    return data


def parse_menu_draft(raw: str, *, default_name: str) -> MenuDraft:
    data = _load_json_object(raw)
    entries = data.get("items")
    if not isinstance(entries, list):
        raise ProviderResponseError("provider JSON has no items list")

    items = []
    skipped = 0
    for index, entry in enumerate(entries):
        try:
            items.append(validate_item_draft(entry))
        except ValidationError as exc:
            skipped += 1
            logger.info("%s dropped draft item index=%s field=%s: %s", INGESTION_PREFIX, index, exc.field, exc.message)

    name = data.get("name")
    description = data.get("description")
    return MenuDraft(
        name=name.strip() if isinstance(name, str) and name.strip() else default_name,
        description=description.strip() if isinstance(description, str) else "",
        items=items,
        skipped_items=skipped,
    )


def generate_menu_draft(provider: TextProvider, request: GenerateMenuRequest) -> MenuDraft:
    raw = provider.complete_json(
        system_prompt=GENERATION_SYSTEM_PROMPT,
        user_prompt=build_generation_prompt(request.cuisine, request.tone),
    )
    draft = parse_menu_draft(raw, default_name=GENERATED_MENU_NAME)
    logger.info(
        "%s generated draft provider=%s items=%s skipped=%s",
        INGESTION_PREFIX,
        provider.name,
        len(draft.items),
        draft.skipped_items,
        extra={"provider": provider.name},
    )
    return draft


def extract_menu_draft(
    provider: TextProvider,
    filename: str | None,
    content_type: str | None,
    data: bytes,
) -> MenuDraft:
    if len(data) > MAX_UPLOAD_BYTES:
        raise ValidationError(f"File is too large. Maximum size is {MAX_UPLOAD_BYTES // (1024 * 1024)} MB.", field="file")

    text = extract_text(filename, content_type, data)
    if len(text.strip()) < MIN_MENU_TEXT_CHARS:
        raise InsufficientContentError()

    raw = provider.complete_json(
        system_prompt=EXTRACTION_SYSTEM_PROMPT,
        user_prompt=build_extraction_prompt(truncate_menu_text(text)),
    )
    draft = parse_menu_draft(raw, default_name=UPLOADED_MENU_NAME)
    logger.info(
        "%s extracted draft file=%r chars=%s items=%s skipped=%s",
        INGESTION_PREFIX,
        filename,
        len(text),
        len(draft.items),
        draft.skipped_items,
        extra={"provider": provider.name},
    )
    return draft


def import_menu_draft(storage: Storage, request: ImportMenuRequest) -> MenuWithItems:
    menu = MenuCreate(
        restaurant_id=request.restaurant_id,
        name=request.name,
        description=request.description,
        is_active=request.is_active,
    )
    return storage.create_menu_with_items(menu, request.items)
