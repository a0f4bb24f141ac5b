from __future__ import annotations

from collections import defaultdict
from typing import Sequence

from sqlalchemy.orm import Session

from qrmenu.models.menu import Menu
from qrmenu.models.menu_item import MenuItem
from qrmenu.schemas.menu_items import MenuItemOut
from qrmenu.schemas.menus import MenuOut, MenuWithItems


def serialize_menu_item(item: MenuItem) -> MenuItemOut:
    return MenuItemOut.model_validate(item)


def _with_items(menu: Menu, items: list[MenuItemOut]) -> MenuWithItems:
    fields = MenuOut.model_validate(menu).model_dump()
    return MenuWithItems(**fields, items=items)


def assemble_menus(db: Session, menus: Sequence[Menu]) -> list[MenuWithItems]:
    """Attach items to each menu, fetched with a single IN query.

    Menu order is preserved; items are ordered by (position, id) and include
    unavailable ones.
    """
    if not menus:
        return []
    menu_ids = [menu.id for menu in menus]
    rows = (
        db.query(MenuItem)
        .filter(MenuItem.menu_id.in_(menu_ids))
        .order_by(MenuItem.position.asc(), MenuItem.id.asc())
        .all()
    )
    by_menu: dict[int, list[MenuItemOut]] = defaultdict(list)
    for row in rows:
        by_menu[row.menu_id].append(serialize_menu_item(row))
    return [_with_items(menu, by_menu.get(menu.id, [])) for menu in menus]


def assemble_menu(db: Session, menu: Menu) -> MenuWithItems:
    return assemble_menus(db, [menu])[0]
