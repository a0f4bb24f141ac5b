"""Customer-facing visibility and merchandising rules.

An item is hidden only when ``is_available`` is explicitly false; merchandising
flags never affect visibility. Inactive menus are skipped on every
customer-facing path.
"""
from __future__ import annotations

from typing import Iterable, Sequence

from qrmenu.schemas.menu_items import MenuItemOut
from qrmenu.schemas.menus import MenuWithItems
from qrmenu.schemas.public import PublicMenuCategory

PUBLIC_FALLBACK_CATEGORY = "Other"
CHAT_FALLBACK_CATEGORY = "Uncategorized"

_TAGS = (
    ("is_bestseller", "BESTSELLER"),
    ("is_chefs_pick", "CHEF'S PICK"),
    ("is_todays_special", "TODAY'S SPECIAL"),
)


def is_visible(item: MenuItemOut) -> bool:
    return item.is_available is not False


def visible_items(menu: MenuWithItems) -> list[MenuItemOut]:
    return [item for item in menu.items if is_visible(item)]


def active_menus(menus: Iterable[MenuWithItems]) -> list[MenuWithItems]:
    return [menu for menu in menus if menu.is_active is not False]


def group_by_category(items: Sequence[MenuItemOut], fallback: str = PUBLIC_FALLBACK_CATEGORY) -> list[PublicMenuCategory]:
    """Group by exact category string, in order of first appearance."""
    groups: dict[str, list[MenuItemOut]] = {}
    for item in items:
        label = item.category if item.category else fallback
        groups.setdefault(label, []).append(item)
    return [PublicMenuCategory(name=name, items=group) for name, group in groups.items()]


def merchandising_tags(item: MenuItemOut) -> list[str]:
    return [label for attr, label in _TAGS if getattr(item, attr)]


def menu_context_line(item: MenuItemOut) -> str:
    tags = merchandising_tags(item)
    tag_text = f" [{', '.join(tags)}]" if tags else ""
    category = item.category or CHAT_FALLBACK_CATEGORY
    return f"- {item.name} ({category}) - AED {item.price}{tag_text}\n  {item.description or ''}"


def build_menu_context(menus: Iterable[MenuWithItems]) -> str:
    lines = []
    for menu in active_menus(menus):
        lines.extend(menu_context_line(item) for item in visible_items(menu))
    return "\n".join(lines)
