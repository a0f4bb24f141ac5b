from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from qrmenu.core.database import get_db
from qrmenu.core.errors import NotFoundError
from qrmenu.core.request_context import set_request_context
from qrmenu.models.menu import Menu
from qrmenu.models.menu_item import MenuItem
from qrmenu.models.restaurant import Restaurant
from qrmenu.services.storage import Storage


def get_storage(db: Session = Depends(get_db)) -> Storage:
    return Storage(db)


def get_current_user_id(request: Request) -> Optional[int]:
    return getattr(request.state, "user_id", None)


def require_user_id(user_id: Optional[int] = Depends(get_current_user_id)) -> int:
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user_id


def _forbidden() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not own this restaurant")


def ensure_restaurant_owner(storage: Storage, restaurant_id: int, user_id: int) -> Restaurant:
    restaurant = storage.get_restaurant_by_id(restaurant_id)
    if restaurant is None:
        raise NotFoundError("Restaurant not found")
    set_request_context(restaurant_id=str(restaurant.id))
    if restaurant.owner_id != user_id:
        raise _forbidden()
    return restaurant


def ensure_menu_owner(storage: Storage, menu_id: int, user_id: int) -> Menu:
    menu = storage.get_menu_row(menu_id)
    if menu is None:
        raise NotFoundError("Menu not found")
    ensure_restaurant_owner(storage, menu.restaurant_id, user_id)
    return menu


def ensure_menu_item_owner(storage: Storage, item_id: int, user_id: int) -> Optional[MenuItem]:
    """Return the item when the caller owns it, None when it does not exist."""
    item = storage.get_menu_item(item_id)
    if item is None:
        return None
    ensure_menu_owner(storage, item.menu_id, user_id)
    return item
