"""Bring rows written by the previous schema up to current invariants.

- plaintext passwords are replaced by salted hashes
- free-text prices are normalized to "45.00" + price_minor; unparseable ones are
  reported and the item is marked unavailable
- restaurant slugs that are not URL-safe are re-derived
- menu and item positions are backfilled in id order

An existing database is first brought to the current schema:

    alembic stamp 0001_create_schema
    alembic upgrade head
    python -m scripts.migrate_legacy_rows
"""
from __future__ import annotations

from collections import defaultdict

from sqlalchemy.orm import Session

from qrmenu.core.database import SessionLocal
from qrmenu.models.menu import Menu
from qrmenu.models.menu_item import MenuItem
from qrmenu.models.restaurant import Restaurant
from qrmenu.models.user import User
from qrmenu.schemas.common import normalize_price, price_to_minor
from qrmenu.schemas.restaurants import SLUG_PATTERN
from qrmenu.services.passwords import hash_password, looks_hashed
from qrmenu.services.slugs import suggest_unique_slug


def hash_plaintext_passwords(db: Session) -> int:
    count = 0
    for user in db.query(User).order_by(User.id.asc()).all():
        if not looks_hashed(user.password_hash):
            user.password_hash = hash_password(user.password_hash or "")
            count += 1
    return count


def normalize_prices(db: Session) -> list[MenuItem]:
    rejected = []
    for item in db.query(MenuItem).order_by(MenuItem.id.asc()).all():
        try:
            item.price = normalize_price(item.price)
        except ValueError:
            item.is_available = False
            rejected.append(item)
            continue
        item.price_minor = price_to_minor(item.price)
    return rejected


def normalize_slugs(db: Session) -> int:
    count = 0
    # Renames are not flushed yet, so slugs handed out in this run are tracked here.
    assigned: set[str] = set()
    for restaurant in db.query(Restaurant).order_by(Restaurant.id.asc()).all():
        if restaurant.slug and SLUG_PATTERN.match(restaurant.slug):
            continue

        def _taken(candidate: str, current_id: int = restaurant.id) -> bool:
            if candidate in assigned:
                return True
            return (
                db.query(Restaurant.id)
                .filter(Restaurant.slug == candidate, Restaurant.id != current_id)
                .first()
                is not None
            )

        new_slug = suggest_unique_slug(restaurant.slug or restaurant.name, _taken) or suggest_unique_slug(
            f"restaurant-{restaurant.id}", _taken
        )
        if new_slug is None:
            raise RuntimeError(f"Could not derive a unique slug for restaurant {restaurant.id}")
        print(f"restaurant_id={restaurant.id} slug={restaurant.slug!r} -> {new_slug!r}")
        restaurant.slug = new_slug
        assigned.add(new_slug)
        count += 1
    return count


def backfill_positions(db: Session) -> None:
    next_menu_position: dict[int, int] = defaultdict(int)
    for menu in db.query(Menu).order_by(Menu.restaurant_id.asc(), Menu.id.asc()).all():
        menu.position = next_menu_position[menu.restaurant_id]
        next_menu_position[menu.restaurant_id] += 1

    next_item_position: dict[int, int] = defaultdict(int)
    for item in db.query(MenuItem).order_by(MenuItem.menu_id.asc(), MenuItem.id.asc()).all():
        item.position = next_item_position[item.menu_id]
        next_item_position[item.menu_id] += 1


def migrate() -> None:
    db = SessionLocal()
    try:
        hashed = hash_plaintext_passwords(db)
        rejected = normalize_prices(db)
        renamed = normalize_slugs(db)
        backfill_positions(db)
        db.commit()

        print(f"passwords hashed={hashed}")
        print(f"slugs rewritten={renamed}")
        for item in rejected:
            print(f"item_id={item.id} menu_id={item.menu_id} price={item.price!r} marked unavailable")
        print("Migration finished.")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    migrate()
