import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from qrmenu.core.database import Base
from qrmenu.core.errors import ConflictError, StorageError
from qrmenu.models.menu import Menu
from qrmenu.models.menu_item import MenuItem
from qrmenu.models.restaurant import Restaurant
from qrmenu.schemas.validation import (
    validate_item_draft,
    validate_menu_create,
    validate_menu_item_create,
    validate_menu_item_update,
    validate_menu_update,
    validate_restaurant_create,
    validate_user_create,
)
from qrmenu.services.storage import Storage
from tests.fixtures_data import ITEM_PAYLOAD, RESTAURANT_PAYLOAD


def _session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)()


def _seed_menu(storage: Storage):
    owner = storage.create_user(validate_user_create({"username": "owner", "password": "pw"}))
    restaurant = storage.create_restaurant(owner.id, validate_restaurant_create(RESTAURANT_PAYLOAD))
    menu = storage.create_menu(validate_menu_create({"restaurantId": restaurant.id, "name": "Dinner"}))
    return owner, restaurant, menu


def test_duplicate_slug_is_conflict_and_writes_nothing():
    db = _session()
    storage = Storage(db)
    owner, _, _ = _seed_menu(storage)

    with pytest.raises(ConflictError) as exc_info:
        storage.create_restaurant(owner.id, validate_restaurant_create({**RESTAURANT_PAYLOAD, "name": "Copy"}))

    assert exc_info.value.field == "slug"
    assert db.query(Restaurant).count() == 1


def test_duplicate_username_is_conflict():
    db = _session()
    storage = Storage(db)
    storage.create_user(validate_user_create({"username": "owner", "password": "pw"}))

    with pytest.raises(ConflictError):
        storage.create_user(validate_user_create({"username": "owner", "password": "other"}))

    assert storage.get_user_by_username("Owner") is None


def test_absence_is_none_not_error():
    storage = Storage(_session())

    assert storage.get_restaurant_by_slug("nope") is None
    assert storage.get_menu_by_id(999) is None
    assert storage.get_menu_item(999) is None
    assert storage.list_menus_by_restaurant(999) == []
    assert storage.update_menu_item(999, validate_menu_item_update({"name": "x"})) is None


def test_item_round_trip_keeps_every_field():
    storage = Storage(_session())
    _, _, menu = _seed_menu(storage)

    created = storage.create_menu_item(
        validate_menu_item_create({**ITEM_PAYLOAD, "menuId": menu.id, "isTodaysSpecial": True, "imageUrl": "https://img/x.jpg"})
    )
    composite = storage.get_menu_by_id(menu.id)

    assert len(composite.items) == 1
    item = composite.items[0]
    assert item.id == created.id
    assert item.name == "Falafel Wrap"
    assert item.description == "Crispy falafel, tahini, pickles."
    assert item.price == "32.00"
    assert item.price_minor == 3200
    assert item.category == "Main"
    assert item.image_url == "https://img/x.jpg"
    assert item.is_available is True
    assert item.is_todays_special is True
    assert item.is_bestseller is False


def test_partial_update_only_touches_patched_fields():
    storage = Storage(_session())
    _, _, menu = _seed_menu(storage)
    item = storage.create_menu_item(validate_menu_item_create({**ITEM_PAYLOAD, "menuId": menu.id, "isBestseller": True}))

    updated = storage.update_menu_item(item.id, validate_menu_item_update({"isAvailable": False}))

    assert updated.is_available is False
    assert updated.name == "Falafel Wrap"
    assert updated.price == "32.00"
    assert updated.category == "Main"
    assert updated.is_bestseller is True


def test_price_update_refreshes_minor_units():
    storage = Storage(_session())
    _, _, menu = _seed_menu(storage)
    item = storage.create_menu_item(validate_menu_item_create({**ITEM_PAYLOAD, "menuId": menu.id}))

    updated = storage.update_menu_item(item.id, validate_menu_item_update({"price": "40.5"}))

    assert updated.price == "40.50"
    assert updated.price_minor == 4050


def test_delete_is_idempotent():
    db = _session()
    storage = Storage(db)
    _, _, menu = _seed_menu(storage)
    item = storage.create_menu_item(validate_menu_item_create({**ITEM_PAYLOAD, "menuId": menu.id}))
    item_id = item.id

    storage.delete_menu_item(item_id)
    storage.delete_menu_item(item_id)
    storage.delete_menu_item(424242)

    assert db.query(MenuItem).count() == 0


def test_positions_follow_creation_order_and_sort_reads():
    storage = Storage(_session())
    _, restaurant, first_menu = _seed_menu(storage)
    second_menu = storage.create_menu(validate_menu_create({"restaurantId": restaurant.id, "name": "Brunch"}))
    for name in ("A", "B", "C"):
        storage.create_menu_item(validate_menu_item_create({**ITEM_PAYLOAD, "name": name, "menuId": first_menu.id}))

    assert (first_menu.position, second_menu.position) == (0, 1)

    storage.update_menu(second_menu.id, validate_menu_update({"position": 0}))
    storage.update_menu(first_menu.id, validate_menu_update({"position": 1}))
    menus = storage.list_menus_by_restaurant(restaurant.id)

    assert [menu.name for menu in menus] == ["Brunch", "Dinner"]
    assert [item.name for item in menus[1].items] == ["A", "B", "C"]
    assert [item.position for item in menus[1].items] == [0, 1, 2]


def test_list_menus_includes_unavailable_items():
    storage = Storage(_session())
    _, restaurant, menu = _seed_menu(storage)
    storage.create_menu_item(validate_menu_item_create({**ITEM_PAYLOAD, "menuId": menu.id, "isAvailable": False}))

    menus = storage.list_menus_by_restaurant(restaurant.id)

    assert menus[0].items[0].is_available is False


def test_null_legacy_flags_read_as_defaults():
    db = _session()
    storage = Storage(db)
    _, _, menu = _seed_menu(storage)
    legacy = MenuItem(menu_id=menu.id, name="Legacy", price="10.00", category="Main")
    db.add(legacy)
    db.commit()
    db.query(MenuItem).filter(MenuItem.id == legacy.id).update({"is_available": None, "is_bestseller": None})
    db.commit()

    item = storage.get_menu_by_id(menu.id).items[0]

    assert item.is_available is True
    assert item.is_bestseller is False


def test_create_menu_with_items_is_all_or_nothing(monkeypatch):
    db = _session()
    storage = Storage(db)
    _, restaurant, _ = _seed_menu(storage)
    drafts = [validate_item_draft({**ITEM_PAYLOAD, "name": f"Dish {n}"}) for n in range(3)]
    original = Storage._add_menu_item
    calls = {"count": 0}

    def _failing_add(self, menu_id, draft, position):
        calls["count"] += 1
        if calls["count"] == 2:
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))
        return original(self, menu_id, draft, position)

    monkeypatch.setattr(Storage, "_add_menu_item", _failing_add)

    with pytest.raises(StorageError):
        storage.create_menu_with_items(validate_menu_create({"restaurantId": restaurant.id, "name": "Imported"}), drafts)

    assert db.query(Menu).filter(Menu.name == "Imported").count() == 0
    assert db.query(MenuItem).count() == 0


def test_create_menu_with_items_keeps_draft_order():
    storage = Storage(_session())
    _, restaurant, _ = _seed_menu(storage)
    drafts = [validate_item_draft({**ITEM_PAYLOAD, "name": name}) for name in ("Soup", "Steak", "Cake")]

    menu = storage.create_menu_with_items(validate_menu_create({"restaurantId": restaurant.id, "name": "Imported"}), drafts)

    assert menu.position == 1
    assert [item.name for item in menu.items] == ["Soup", "Steak", "Cake"]


def test_database_failure_surfaces_as_storage_error(monkeypatch):
    db = _session()
    storage = Storage(db)

    def _broken_query(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "query", _broken_query)

    with pytest.raises(StorageError) as exc_info:
        storage.get_restaurant_by_slug("casa-verde")

    assert "locked" not in exc_info.value.to_payload()["message"]
