from __future__ import annotations

from typing import Optional

from qrmenu.core.errors import NotFoundError
from qrmenu.core.request_context import set_request_context
from qrmenu.schemas.public import PublicMenuResponse, PublicMenuSummary, PublicRestaurant
from qrmenu.schemas.restaurants import DEFAULT_TABLE_COUNT
from qrmenu.services.availability import PUBLIC_FALLBACK_CATEGORY, active_menus, group_by_category, visible_items
from qrmenu.services.storage import Storage


def resolve_table(table: Optional[str], table_count: Optional[int]) -> Optional[int]:
    """Echo the table number back only when it exists in the restaurant."""
    text = (table or "").strip()
    if not (text.isascii() and text.isdigit()):
        return None
    number = int(text)
    limit = table_count or DEFAULT_TABLE_COUNT
    return number if 1 <= number <= limit else None


def build_public_menu(storage: Storage, slug: str, table: Optional[str] = None) -> PublicMenuResponse:
    restaurant = storage.get_restaurant_by_slug(slug.strip().lower())
    if restaurant is None:
        raise NotFoundError("Restaurant not found")
    set_request_context(restaurant_id=str(restaurant.id))

    menus = active_menus(storage.list_menus_by_restaurant(restaurant.id))
    response = PublicMenuResponse(
        restaurant=PublicRestaurant.model_validate(restaurant),
        table=resolve_table(table, restaurant.table_count),
    )
    if not menus:
        return response

    menu = menus[0]
    response.menu = PublicMenuSummary(id=menu.id, name=menu.name, description=menu.description)
    response.categories = group_by_category(visible_items(menu), PUBLIC_FALLBACK_CATEGORY)
    return response


def list_public_restaurants(storage: Storage) -> list[PublicRestaurant]:
    return [PublicRestaurant.model_validate(row) for row in storage.list_restaurants()]
