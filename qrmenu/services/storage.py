"""Persistence gateway: one method per access pattern.

Reads return ``None`` or an empty list on absence. Writes commit on success and
roll back on failure; unique-constraint violations surface as ``ConflictError``
and every other database failure as ``StorageError``. Nothing is retried.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from qrmenu.core.errors import ConflictError, StorageError
from qrmenu.models.menu import Menu
from qrmenu.models.menu_item import MenuItem
from qrmenu.models.restaurant import Restaurant
from qrmenu.models.user import User
from qrmenu.schemas.common import price_to_minor
from qrmenu.schemas.menu_items import MenuItemCreate, MenuItemDraft, MenuItemUpdate
from qrmenu.schemas.menus import MenuCreate, MenuUpdate, MenuWithItems
from qrmenu.schemas.restaurants import RestaurantCreate, RestaurantUpdate
from qrmenu.schemas.users import NewUser
from qrmenu.services.menu_assembly import assemble_menu, assemble_menus

logger = logging.getLogger(__name__)
STORAGE_PREFIX = "[STORAGE]"


def _conflict_from(exc: IntegrityError) -> ConflictError:
    detail = str(getattr(exc, "orig", exc)).lower()
    if "slug" in detail:
        return ConflictError("Restaurant slug already exists", field="slug")
    if "username" in detail:
        return ConflictError("Username already exists", field="username")
    return ConflictError()


class Storage:
    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def _guard(self, action: str, *, commit: bool = False) -> Iterator[None]:
        try:
            yield
            if commit:
                self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("%s %s rejected by constraint: %s", STORAGE_PREFIX, action, getattr(exc, "orig", exc))
            raise _conflict_from(exc) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("%s %s failed", STORAGE_PREFIX, action)
            raise StorageError(f"{action} failed") from exc

    def _next_position(self, column, parent_column, parent_id: int) -> int:
        current = self.db.query(func.max(column)).filter(parent_column == parent_id).scalar()
        return 0 if current is None else int(current) + 1

    # Users

    def create_user(self, new_user: NewUser) -> User:
        user = User(username=new_user.username, password_hash=new_user.password_hash)
        with self._guard("create_user", commit=True):
            self.db.add(user)
            self.db.flush()
        self.db.refresh(user)
        return user

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        with self._guard("get_user_by_id"):
            return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._guard("get_user_by_username"):
            return self.db.query(User).filter(User.username == username).first()

    def update_user_password_hash(self, user: User, password_hash: str) -> None:
        with self._guard("update_user_password_hash", commit=True):
            user.password_hash = password_hash

    # Restaurants

    def create_restaurant(self, owner_id: int, data: RestaurantCreate) -> Restaurant:
        restaurant = Restaurant(owner_id=owner_id, **data.model_dump())
        with self._guard("create_restaurant", commit=True):
            self.db.add(restaurant)
            self.db.flush()
        self.db.refresh(restaurant)
        return restaurant

    def get_restaurant_by_id(self, restaurant_id: int) -> Optional[Restaurant]:
        with self._guard("get_restaurant_by_id"):
            return self.db.query(Restaurant).filter(Restaurant.id == restaurant_id).first()

    def get_restaurant_by_slug(self, slug: str) -> Optional[Restaurant]:
        with self._guard("get_restaurant_by_slug"):
            return self.db.query(Restaurant).filter(Restaurant.slug == slug).first()

    def list_restaurants_by_owner(self, owner_id: int) -> list[Restaurant]:
        with self._guard("list_restaurants_by_owner"):
            return (
                self.db.query(Restaurant)
                .filter(Restaurant.owner_id == owner_id)
                .order_by(Restaurant.id.asc())
                .all()
            )

    def list_restaurants(self) -> list[Restaurant]:
        with self._guard("list_restaurants"):
            return self.db.query(Restaurant).order_by(Restaurant.id.asc()).all()

    def update_restaurant(self, restaurant_id: int, patch: RestaurantUpdate) -> Optional[Restaurant]:
        restaurant = self.get_restaurant_by_id(restaurant_id)
        if restaurant is None:
            return None
        changes = patch.model_dump(exclude_unset=True)
        if not changes:
            return restaurant
        with self._guard("update_restaurant", commit=True):
            for field, value in changes.items():
                setattr(restaurant, field, value)
            self.db.flush()
        self.db.refresh(restaurant)
        return restaurant

    # Menus

    def _add_menu(self, data: MenuCreate) -> Menu:
        menu = Menu(
            restaurant_id=data.restaurant_id,
            name=data.name,
            description=data.description,
            is_active=data.is_active,
            position=self._next_position(Menu.position, Menu.restaurant_id, data.restaurant_id),
        )
        self.db.add(menu)
        self.db.flush()
        return menu

    def create_menu(self, data: MenuCreate) -> Menu:
        with self._guard("create_menu", commit=True):
            menu = self._add_menu(data)
        self.db.refresh(menu)
        return menu

    def get_menu_row(self, menu_id: int) -> Optional[Menu]:
        with self._guard("get_menu_row"):
            return self.db.query(Menu).filter(Menu.id == menu_id).first()

    def get_menu_by_id(self, menu_id: int) -> Optional[MenuWithItems]:
        menu = self.get_menu_row(menu_id)
        if menu is None:
            return None
        with self._guard("get_menu_by_id"):
            return assemble_menu(self.db, menu)

    def list_menus_by_restaurant(self, restaurant_id: int) -> list[MenuWithItems]:
        with self._guard("list_menus_by_restaurant"):
            menus = (
                self.db.query(Menu)
                .filter(Menu.restaurant_id == restaurant_id)
                .order_by(Menu.position.asc(), Menu.id.asc())
                .all()
            )
            return assemble_menus(self.db, menus)

    def update_menu(self, menu_id: int, patch: MenuUpdate) -> Optional[Menu]:
        menu = self.get_menu_row(menu_id)
        if menu is None:
            return None
        changes = patch.model_dump(exclude_unset=True)
        if not changes:
            return menu
        with self._guard("update_menu", commit=True):
            for field, value in changes.items():
                setattr(menu, field, value)
            self.db.flush()
        self.db.refresh(menu)
        return menu

    # Menu items

    def _add_menu_item(self, menu_id: int, draft: MenuItemDraft, position: int) -> MenuItem:
        values = draft.model_dump(exclude={"menu_id"})
        item = MenuItem(
            menu_id=menu_id,
            price_minor=price_to_minor(draft.price),
            position=position,
            **values,
        )
        self.db.add(item)
        return item

    def create_menu_item(self, data: MenuItemCreate) -> MenuItem:
        with self._guard("create_menu_item", commit=True):
            position = self._next_position(MenuItem.position, MenuItem.menu_id, data.menu_id)
            item = self._add_menu_item(data.menu_id, data, position)
            self.db.flush()
        self.db.refresh(item)
        return item

    def get_menu_item(self, item_id: int) -> Optional[MenuItem]:
        with self._guard("get_menu_item"):
            return self.db.query(MenuItem).filter(MenuItem.id == item_id).first()

    def update_menu_item(self, item_id: int, patch: MenuItemUpdate) -> Optional[MenuItem]:
        item = self.get_menu_item(item_id)
        if item is None:
            return None
        changes = patch.changes()
        if not changes:
            return item
        with self._guard("update_menu_item", commit=True):
            if "menu_id" in changes and changes["menu_id"] != item.menu_id:
                item.position = self._next_position(MenuItem.position, MenuItem.menu_id, changes["menu_id"])
            for field, value in changes.items():
                setattr(item, field, value)
            if "price" in changes:
                item.price_minor = price_to_minor(changes["price"])
            self.db.flush()
        self.db.refresh(item)
        return item

    def delete_menu_item(self, item_id: int) -> None:
        with self._guard("delete_menu_item", commit=True):
            self.db.query(MenuItem).filter(MenuItem.id == item_id).delete(synchronize_session=False)

    def create_menu_with_items(self, data: MenuCreate, items: Sequence[MenuItemDraft]) -> MenuWithItems:
        """Create a menu and all of its items in one transaction."""
        with self._guard("create_menu_with_items", commit=True):
            menu = self._add_menu(data)
            for position, draft in enumerate(items):
                self._add_menu_item(menu.id, draft, position)
            self.db.flush()
        self.db.refresh(menu)
        with self._guard("create_menu_with_items"):
            return assemble_menu(self.db, menu)
