from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from qrmenu.core.database import Base
from qrmenu.models.menu import Menu
from qrmenu.models.menu_item import MenuItem
from qrmenu.models.restaurant import Restaurant
from qrmenu.models.user import User
from qrmenu.services.passwords import verify_password
from scripts.migrate_legacy_rows import backfill_positions, hash_plaintext_passwords, normalize_prices, normalize_slugs

REPO_ROOT = Path(__file__).resolve().parents[1]


def _session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)()


def _legacy_rows(db):
    db.add(User(id=1, username="admin", password_hash="password"))
    db.add(Restaurant(id=1, owner_id=1, name="Old Place", slug="Old Place!"))
    db.add(Restaurant(id=2, owner_id=1, name="Fine", slug="fine"))
    db.add(Menu(id=1, restaurant_id=1, name="A"))
    db.add(Menu(id=2, restaurant_id=1, name="B"))
    db.add(MenuItem(id=1, menu_id=1, name="Soup", price="AED 25", category="Main"))
    db.add(MenuItem(id=2, menu_id=1, name="Market Fish", price="market price", category="Main"))
    db.commit()


def test_plaintext_passwords_are_hashed_once():
    db = _session()
    _legacy_rows(db)

    assert hash_plaintext_passwords(db) == 1
    db.commit()
    assert hash_plaintext_passwords(db) == 0
    assert verify_password("password", db.get(User, 1).password_hash)


def test_prices_are_normalized_and_unparseable_rows_hidden():
    db = _session()
    _legacy_rows(db)

    rejected = normalize_prices(db)
    db.commit()

    soup = db.get(MenuItem, 1)
    fish = db.get(MenuItem, 2)
    assert (soup.price, soup.price_minor) == ("25.00", 2500)
    assert [item.id for item in rejected] == [2]
    assert fish.is_available is False
    assert fish.price == "market price"


def test_unsafe_slugs_are_rewritten_and_positions_backfilled():
    db = _session()
    _legacy_rows(db)

    assert normalize_slugs(db) == 1
    backfill_positions(db)
    db.commit()

    assert db.get(Restaurant, 1).slug == "old-place"
    assert db.get(Restaurant, 2).slug == "fine"
    assert [db.get(Menu, 1).position, db.get(Menu, 2).position] == [0, 1]
    assert [db.get(MenuItem, 1).position, db.get(MenuItem, 2).position] == [0, 1]


def test_case_variant_slugs_get_distinct_rewrites():
    db = _session()
    db.add(User(id=1, username="admin", password_hash="password"))
    db.add(Restaurant(id=1, owner_id=1, name="Cafe One", slug="Cafe"))
    db.add(Restaurant(id=2, owner_id=1, name="Cafe Two", slug="CAFE"))
    db.add(Restaurant(id=3, owner_id=1, name="Cafe Three", slug="cafe-2"))
    db.commit()

    assert normalize_slugs(db) == 2
    db.commit()

    slugs = [db.get(Restaurant, restaurant_id).slug for restaurant_id in (1, 2, 3)]
    assert slugs == ["cafe", "cafe-3", "cafe-2"]


_LEGACY_TABLES = (
    """
    CREATE TABLE users (
        id INTEGER PRIMARY KEY,
        username TEXT NOT NULL UNIQUE,
        password TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE restaurants (
        id INTEGER PRIMARY KEY,
        user_id INTEGER NOT NULL,
        name TEXT NOT NULL,
        slug TEXT NOT NULL UNIQUE,
        address TEXT,
        contact_number TEXT,
        whatsapp_number TEXT,
        cuisine_type TEXT,
        description TEXT,
        cover_image TEXT,
        table_count INTEGER DEFAULT 10,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE menus (
        id INTEGER PRIMARY KEY,
        restaurant_id INTEGER NOT NULL,
        name TEXT NOT NULL,
        description TEXT,
        is_active BOOLEAN DEFAULT 1,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE menu_items (
        id INTEGER PRIMARY KEY,
        menu_id INTEGER NOT NULL,
        name TEXT NOT NULL,
        description TEXT,
        price TEXT NOT NULL,
        category TEXT NOT NULL,
        image_url TEXT,
        is_available BOOLEAN DEFAULT 1,
        is_bestseller BOOLEAN DEFAULT 0,
        is_chefs_pick BOOLEAN DEFAULT 0,
        is_todays_special BOOLEAN DEFAULT 0
    )
    """,
)

_LEGACY_ROWS = (
    "INSERT INTO users (id, username, password) VALUES (1, 'admin', 'password')",
    "INSERT INTO restaurants (id, user_id, name, slug) VALUES (1, 1, 'Cafe One', 'Cafe')",
    "INSERT INTO restaurants (id, user_id, name, slug) VALUES (2, 1, 'Cafe Two', 'CAFE')",
    "INSERT INTO menus (id, restaurant_id, name) VALUES (1, 1, 'Lunch')",
    "INSERT INTO menus (id, restaurant_id, name) VALUES (2, 1, 'Dinner')",
    "INSERT INTO menu_items (id, menu_id, name, price, category) VALUES (1, 2, 'Soup', 'AED 25', 'Main')",
    "INSERT INTO menu_items (id, menu_id, name, price, category) VALUES (2, 2, 'Fish', 'market price', 'Main')",
)


def test_legacy_database_upgrades_then_migrates():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as connection:
        for statement in _LEGACY_TABLES + _LEGACY_ROWS:
            connection.execute(text(statement))

    config = Config()
    config.set_main_option("script_location", str(REPO_ROOT / "alembic"))
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.stamp(config, "0001_create_schema")
        command.upgrade(config, "head")

    columns = {column["name"] for column in inspect(engine).get_columns("menu_items")}
    assert {"position", "price_minor"} <= columns

    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    assert hash_plaintext_passwords(db) == 1
    rejected = normalize_prices(db)
    assert normalize_slugs(db) == 2
    backfill_positions(db)
    db.commit()

    assert [item.id for item in rejected] == [2]
    assert (db.get(MenuItem, 1).price, db.get(MenuItem, 1).price_minor) == ("25.00", 2500)
    assert [db.get(Restaurant, 1).slug, db.get(Restaurant, 2).slug] == ["cafe", "cafe-2"]
    assert [db.get(Menu, 1).position, db.get(Menu, 2).position] == [0, 1]
    assert verify_password("password", db.get(User, 1).password_hash)
