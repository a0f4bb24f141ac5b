from __future__ import annotations

import json
import re

from qrmenu.ai.base import ChatMessage

EXTRACTED_TEXT_START = "--- EXTRACTED MENU TEXT ---"
EXTRACTED_TEXT_END = "--- END ---"

_PRICED_LINE = re.compile(r"^\s*(?P<name>[^\d].*?)\s*[-:.–—]*\s*(?:aed|dhs?)?\s*(?P<price>\d+(?:\.\d{1,2})?)\s*(?:aed|dhs?)?\s*$", re.IGNORECASE)

_SAMPLE_ITEMS = [
    ("House Salad", "Crisp greens with lemon dressing.", "28.00", "Appetizer"),
    ("Soup of the Day", "Ask your server for today's pick.", "24.00", "Appetizer"),
    ("Grilled Chicken", "Herb-marinated chicken with seasonal vegetables.", "65.00", "Main"),
    ("Slow-Cooked Beef", "Tender beef with a rich house sauce.", "95.00", "Main"),
    ("Chocolate Tart", "Dark chocolate ganache on a butter crust.", "35.00", "Dessert"),
    ("Fresh Lemonade", "Squeezed to order.", "18.00", "Drink"),
]


def _extracted_lines(user_prompt: str) -> list[str]:
    if EXTRACTED_TEXT_START not in user_prompt:
        return []
    body = user_prompt.split(EXTRACTED_TEXT_START, 1)[1].split(EXTRACTED_TEXT_END, 1)[0]
    return [line.strip() for line in body.splitlines() if line.strip()]


class MockProvider:
    """Deterministic offline provider for local development and tests."""

    name = "mock"

    def complete_json(self, *, system_prompt: str, user_prompt: str) -> str:
        lines = _extracted_lines(user_prompt)
        if lines:
            items = []
            for line in lines:
                match = _PRICED_LINE.match(line)
                if not match:
                    continue
                items.append(
                    {
                        "name": match.group("name").strip(" -:"),
                        "description": "",
                        "price": match.group("price"),
                        "category": "Main",
                    }
                )
            return json.dumps({"name": "Uploaded Menu", "description": "Imported from file", "items": items})

        items = [
            {
                "name": name,
                "description": description,
                "price": price,
                "category": category,
                "isBestseller": index == 2,
                "isChefsPick": index == 3,
                "isTodaysSpecial": index == 1,
            }
            for index, (name, description, price, category) in enumerate(_SAMPLE_ITEMS)
        ]
        return json.dumps({"name": "Sample Menu", "description": "Generated offline", "items": items})

    def chat(self, *, system_prompt: str, messages: list[ChatMessage], max_tokens: int) -> str:
        dishes = [line[2:].split(" (", 1)[0] for line in system_prompt.splitlines() if line.startswith("- ")]
        if not dishes:
            return "The menu is not available right now. Please ask a member of staff."
        return f"Our menu has {len(dishes)} dishes. A good place to start is the {dishes[0]}."
