from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from qrmenu.core.config import DEMO_OWNER_PASSWORD, DEMO_OWNER_USERNAME
from qrmenu.schemas.menu_items import MenuItemDraft
from qrmenu.schemas.menus import MenuCreate
from qrmenu.schemas.restaurants import RestaurantCreate
from qrmenu.schemas.users import NewUser
from qrmenu.services.passwords import hash_password, looks_hashed
from qrmenu.services.storage import Storage

logger = logging.getLogger(__name__)
SEED_PREFIX = "[DEMO_SEED]"

DEMO_SLUG = "demo-bistro"
_PHOTO = "https://images.unsplash.com/photo-{}?w=400&h=300&fit=crop"

DEMO_RESTAURANT = {
    "name": "The Golden Fork",
    "slug": DEMO_SLUG,
    "address": "Downtown Dubai, UAE",
    "cuisineType": "Mediterranean",
    "description": "A modern Mediterranean bistro serving fresh, vibrant dishes with a Middle Eastern twist.",
    "tableCount": 12,
}

DEMO_MENU = {
    "name": "Signature Menu",
    "description": "Our chef's handpicked selection of Mediterranean & Middle Eastern favorites",
}

# (name, description, price, category, photo id, tag)
DEMO_ITEMS = [
    ("Truffle Hummus", "Creamy chickpea hummus drizzled with truffle oil, served with warm pita.", "38.00", "Appetizer", "1637361973-e2ef1e177713", "bestseller"),
    ("Grilled Halloumi Salad", "Crispy halloumi over mixed greens with pomegranate and za'atar dressing.", "45.00", "Appetizer", "1540189549336-e6e99c3679fe", "chefs_pick"),
    ("Lamb Kibbeh", "Crispy fried lamb and bulgur croquettes with yogurt mint dip.", "42.00", "Appetizer", "1544025162-d76694265947", None),
    ("Seafood Risotto", "Arborio rice with prawns, calamari, and saffron broth. Finished with parmesan.", "95.00", "Main", "1534422298391-e4f8c172dddb", "bestseller"),
    ("Grilled Lamb Chops", "New Zealand lamb chops with rosemary jus, roasted vegetables, and mashed potato.", "120.00", "Main", "1598515214211-89d3c73ae83b", "chefs_pick"),
    ("Pan-Seared Salmon", "Atlantic salmon with lemon butter sauce, asparagus, and quinoa pilaf.", "98.00", "Main", "1467003909585-2f8a72700288", None),
    ("Chicken Shawarma Plate", "Marinated chicken with garlic sauce, pickles, fries, and fresh tabouleh.", "65.00", "Main", "1529006557810-274b9b2fc783", "todays_special"),
    ("Truffle Mushroom Pasta", "Fresh pappardelle with wild mushroom ragout and shaved black truffle.", "85.00", "Main", "1621996346565-e3dbc646d9a9", None),
    ("Kunafa Cheesecake", "Fusion dessert blending crispy kunafa with creamy New York cheesecake.", "42.00", "Dessert", "1565958011703-44f9829ba187", "bestseller"),
    ("Pistachio Baklava", "Layers of golden phyllo pastry with crushed pistachios and rose syrup.", "35.00", "Dessert", "1519676867240-f03562e64571", None),
    ("Chocolate Lava Cake", "Warm chocolate fondant with vanilla bean ice cream and berry coulis.", "48.00", "Dessert", "1606313564200-e75d5e30476c", "chefs_pick"),
    ("Fresh Mint Lemonade", "House-made lemonade with fresh mint leaves and a hint of rose water.", "22.00", "Drink", "1556881286-fc6915169721", None),
    ("Turkish Coffee", "Traditional slow-brewed Turkish coffee served with dates.", "18.00", "Drink", "1514432324607-a09d9b4aefda", None),
    ("Mango Lassi", "Chilled yogurt smoothie with Alphonso mango and a touch of cardamom.", "25.00", "Drink", "1527661591475-527312dd65f5", "todays_special"),
]


def _demo_drafts() -> list[MenuItemDraft]:
    return [
        MenuItemDraft(
            name=name,
            description=description,
            price=price,
            category=category,
            image_url=_PHOTO.format(photo),
            is_bestseller=tag == "bestseller",
            is_chefs_pick=tag == "chefs_pick",
            is_todays_special=tag == "todays_special",
        )
        for name, description, price, category, photo, tag in DEMO_ITEMS
    ]


def seed_demo_restaurant(
    db: Session,
    *,
    owner_username: str = DEMO_OWNER_USERNAME,
    owner_password: str = DEMO_OWNER_PASSWORD,
) -> bool:
    """Create the demo restaurant and its menu if missing. Returns True when rows were added."""
    storage = Storage(db)
    if storage.get_restaurant_by_slug(DEMO_SLUG) is not None:
        logger.info("%s demo restaurant already present slug=%s", SEED_PREFIX, DEMO_SLUG)
        return False

    owner = storage.get_user_by_username(owner_username)
    if owner is None:
        if not owner_password:
            logger.warning("%s skipped: configure DEMO_OWNER_PASSWORD.", SEED_PREFIX)
            return False
        password_hash = owner_password if looks_hashed(owner_password) else hash_password(owner_password)
        owner = storage.create_user(NewUser(username=owner_username, password_hash=password_hash))
        logger.info("%s created demo owner id=%s username=%s", SEED_PREFIX, owner.id, owner.username)

    restaurant = storage.create_restaurant(owner.id, RestaurantCreate.model_validate(DEMO_RESTAURANT))
    menu = storage.create_menu_with_items(
        MenuCreate(restaurant_id=restaurant.id, **DEMO_MENU),
        _demo_drafts(),
    )
    logger.info(
        "%s seeded restaurant id=%s menu id=%s items=%s",
        SEED_PREFIX,
        restaurant.id,
        menu.id,
        len(menu.items),
        extra={"restaurant_id": restaurant.id},
    )
    return True
