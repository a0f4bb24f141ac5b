import json

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from qrmenu.ai.service import get_chat_provider, get_generation_provider
from qrmenu.core.database import Base, get_db
from qrmenu.core.errors import ProviderRateLimitError, register_error_handlers
from qrmenu.middleware.session import SessionMiddleware
from qrmenu.routers.auth import router as auth_router
from qrmenu.routers.chat import router as chat_router
from qrmenu.routers.menu_items import router as menu_items_router
from qrmenu.routers.menus import router as menus_router
from qrmenu.routers.public_menu import router as public_menu_router
from qrmenu.routers.restaurants import router as restaurants_router
from tests.fixtures_data import ITEM_PAYLOAD, OTHER_OWNER_CREDENTIALS, OWNER_CREDENTIALS, PROVIDER_MENU_JSON, RESTAURANT_PAYLOAD


class _ScriptedProvider:
    name = "scripted"

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def complete_json(self, *, system_prompt, user_prompt):
        self.calls.append({"system": system_prompt, "user": user_prompt})
        if self.error:
            raise self.error
        return self.reply

    def chat(self, *, system_prompt, messages, max_tokens):
        self.calls.append({"system": system_prompt, "messages": messages, "max_tokens": max_tokens})
        if self.error:
            raise self.error
        return self.reply


def _build_app(provider=None) -> FastAPI:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    testing_session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    app = FastAPI()
    app.add_middleware(SessionMiddleware)
    register_error_handlers(app)
    for router in (auth_router, restaurants_router, chat_router, menus_router, menu_items_router, public_menu_router):
        app.include_router(router)

    def override_get_db():
        db = testing_session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    scripted = provider or _ScriptedProvider()
    app.dependency_overrides[get_generation_provider] = lambda: scripted
    app.dependency_overrides[get_chat_provider] = lambda: scripted
    return app


def _signed_in(app: FastAPI, credentials=OWNER_CREDENTIALS) -> TestClient:
    client = TestClient(app)
    response = client.post("/api/register", json=credentials)
    assert response.status_code == 201
    return client


def _restaurant_with_menu(client: TestClient, **restaurant_overrides):
    restaurant = client.post("/api/restaurants", json={**RESTAURANT_PAYLOAD, **restaurant_overrides}).json()
    menu = client.post("/api/menus", json={"restaurantId": restaurant["id"], "name": "Dinner"}).json()
    return restaurant, menu


def test_register_login_and_current_user():
    app = _build_app()
    client = _signed_in(app)

    me = client.get("/api/user")
    assert me.status_code == 200
    assert me.json()["username"] == "owner"
    assert "password" not in me.json()

    client.post("/api/logout")
    assert client.get("/api/user").status_code == 401

    bad = client.post("/api/login", json={"username": "owner", "password": "wrong"})
    assert bad.status_code == 401
    assert bad.json() == {"message": "Invalid credentials"}

    good = client.post("/api/login", json=OWNER_CREDENTIALS)
    assert good.status_code == 200
    assert client.get("/api/user").json()["id"] == good.json()["id"]


def test_duplicate_username_is_conflict():
    app = _build_app()
    _signed_in(app)

    response = TestClient(app).post("/api/register", json=OWNER_CREDENTIALS)

    assert response.status_code == 409
    assert response.json() == {"message": "Username already exists", "field": "username"}


def test_validation_error_body_names_first_field():
    client = _signed_in(_build_app())

    response = client.post("/api/restaurants", json={"slug": "x"})

    assert response.status_code == 400
    assert response.json()["field"] == "name"


def test_protected_routes_require_session():
    client = TestClient(_build_app())

    assert client.get("/api/restaurants").status_code == 401
    assert client.post("/api/menus", json={"restaurantId": 1, "name": "x"}).status_code == 401
    assert client.delete("/api/menu-items/1").status_code == 401


def test_restaurant_slug_conflict_and_availability():
    client = _signed_in(_build_app())

    created = client.post("/api/restaurants", json=RESTAURANT_PAYLOAD)
    duplicate = client.post("/api/restaurants", json={**RESTAURANT_PAYLOAD, "name": "Other"})
    availability = client.get("/api/restaurants/slug-availability", params={"slug": "Casa Verde"})

    assert created.status_code == 201
    assert created.json()["slug"] == "casa-verde"
    assert created.json()["tableCount"] == 10
    assert duplicate.status_code == 409
    assert duplicate.json()["field"] == "slug"
    assert availability.json() == {"slug": "casa-verde", "available": False, "suggestion": "casa-verde-2"}
    assert len(client.get("/api/restaurants").json()) == 1


def test_owner_checks_reject_other_users():
    app = _build_app()
    owner = _signed_in(app)
    restaurant, menu = _restaurant_with_menu(owner)
    item = owner.post("/api/menu-items", json={**ITEM_PAYLOAD, "menuId": menu["id"]}).json()
    rival = _signed_in(app, OTHER_OWNER_CREDENTIALS)

    assert rival.get(f"/api/restaurants/{restaurant['id']}/menus").status_code == 403
    assert rival.patch(f"/api/restaurants/{restaurant['id']}", json={"name": "Mine"}).status_code == 403
    assert rival.post("/api/menus", json={"restaurantId": restaurant["id"], "name": "x"}).status_code == 403
    assert rival.patch(f"/api/menu-items/{item['id']}", json={"price": "1"}).status_code == 403
    assert rival.delete(f"/api/menu-items/{item['id']}").status_code == 403
    assert owner.get(f"/api/menus/{menu['id']}").json()["items"][0]["price"] == "32.00"


def test_item_lifecycle_patch_and_idempotent_delete():
    client = _signed_in(_build_app())
    _, menu = _restaurant_with_menu(client)

    created = client.post("/api/menu-items", json={**ITEM_PAYLOAD, "menuId": menu["id"]})
    item_id = created.json()["id"]
    patched = client.patch(f"/api/menu-items/{item_id}", json={"isAvailable": False})
    first_delete = client.delete(f"/api/menu-items/{item_id}")
    second_delete = client.delete(f"/api/menu-items/{item_id}")

    assert created.status_code == 201
    assert created.json()["isAvailable"] is True
    assert patched.json()["isAvailable"] is False
    assert patched.json()["name"] == "Falafel Wrap"
    assert first_delete.status_code == 204
    assert second_delete.status_code == 204
    assert client.get(f"/api/menus/{menu['id']}").json()["items"] == []


def test_item_with_free_text_price_is_rejected():
    client = _signed_in(_build_app())
    _, menu = _restaurant_with_menu(client)

    response = client.post("/api/menu-items", json={**ITEM_PAYLOAD, "menuId": menu["id"], "price": "ask staff"})

    assert response.status_code == 400
    assert response.json() == {"message": "Price must be a numeric amount, e.g. 45.00", "field": "price"}


def test_public_menu_hides_unavailable_items_and_inactive_menus():
    app = _build_app()
    client = _signed_in(app)
    restaurant, menu = _restaurant_with_menu(client, tableCount=5)
    client.post("/api/menu-items", json={**ITEM_PAYLOAD, "menuId": menu["id"], "name": "Visible", "category": "Main"})
    client.post("/api/menu-items", json={**ITEM_PAYLOAD, "menuId": menu["id"], "name": "Tea", "category": "Drink"})
    client.post("/api/menu-items", json={**ITEM_PAYLOAD, "menuId": menu["id"], "name": "Hidden", "isAvailable": False})
    public = TestClient(app)

    page = public.get("/api/public/menu/casa-verde", params={"table": "3"}).json()
    out_of_range = public.get("/api/public/menu/casa-verde", params={"table": "9"}).json()

    assert page["menu"]["name"] == "Dinner"
    assert page["table"] == 3
    assert out_of_range["table"] is None
    assert "ownerId" not in page["restaurant"]
    assert [group["name"] for group in page["categories"]] == ["Main", "Drink"]
    assert [item["name"] for item in page["categories"][0]["items"]] == ["Visible"]

    client.patch(f"/api/menus/{menu['id']}", json={"isActive": False})
    empty = public.get("/api/public/menu/casa-verde").json()
    owner_view = client.get(f"/api/restaurants/{restaurant['id']}/menus").json()

    assert empty["menu"] is None
    assert empty["categories"] == []
    assert len(owner_view) == 1
    assert len(owner_view[0]["items"]) == 3


def test_public_menu_unknown_slug_is_404():
    response = TestClient(_build_app()).get("/api/public/menu/missing")

    assert response.status_code == 404
    assert response.json() == {"message": "Restaurant not found"}


def test_generate_returns_revalidated_draft():
    provider = _ScriptedProvider(PROVIDER_MENU_JSON)
    client = _signed_in(_build_app(provider))
    restaurant, _ = _restaurant_with_menu(client)

    response = client.post("/api/menus/generate", json={"restaurantId": restaurant["id"], "cuisine": "Lebanese"})

    assert response.status_code == 200
    assert response.json()["skippedItems"] == 2
    assert [item["name"] for item in response.json()["items"]] == ["Hummus", "Mixed Grill", "Mint Tea"]


def test_provider_rate_limit_maps_to_429_with_public_message():
    provider = _ScriptedProvider(error=ProviderRateLimitError("openai rate limited"))
    client = _signed_in(_build_app(provider))
    restaurant, _ = _restaurant_with_menu(client)

    response = client.post("/api/menus/generate", json={"restaurantId": restaurant["id"], "cuisine": "Thai"})

    assert response.status_code == 429
    assert "openai" not in response.json()["message"]


def test_upload_extracts_text_file_and_rejects_unknown_types():
    provider = _ScriptedProvider(json.dumps({"name": "From File", "items": [{"name": "Dal", "price": "20", "category": "Main"}]}))
    client = _signed_in(_build_app(provider))
    restaurant, _ = _restaurant_with_menu(client)

    uploaded = client.post(
        "/api/menus/upload",
        data={"restaurantId": str(restaurant["id"])},
        files={"file": ("menu.txt", b"Dal Makhani 20\nGarlic Naan 8\n", "text/plain")},
    )
    rejected = client.post(
        "/api/menus/upload",
        data={"restaurantId": str(restaurant["id"])},
        files={"file": ("menu.png", b"\x89PNG", "image/png")},
    )

    assert uploaded.status_code == 200
    assert uploaded.json()["name"] == "From File"
    assert "Dal Makhani 20" in provider.calls[0]["user"]
    assert rejected.status_code == 415


def test_import_creates_menu_and_items_in_order():
    client = _signed_in(_build_app())
    restaurant, _ = _restaurant_with_menu(client)

    response = client.post(
        "/api/menus/import",
        json={
            "restaurantId": restaurant["id"],
            "name": "Imported",
            "items": [
                {"name": "Soup", "price": "18", "category": "Appetizer"},
                {"name": "Kebab", "price": "55", "category": "Main", "isChefsPick": True},
            ],
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert [item["name"] for item in body["items"]] == ["Soup", "Kebab"]
    assert body["items"][1]["isChefsPick"] is True
    assert len(client.get(f"/api/restaurants/{restaurant['id']}/menus").json()) == 2


def test_chat_uses_visible_menu_and_trims_history():
    provider = _ScriptedProvider("Try the Falafel Wrap for AED 32.00.")
    app = _build_app(provider)
    client = _signed_in(app)
    restaurant, menu = _restaurant_with_menu(client)
    client.post("/api/menu-items", json={**ITEM_PAYLOAD, "menuId": menu["id"]})
    client.post("/api/menu-items", json={**ITEM_PAYLOAD, "menuId": menu["id"], "name": "Gone", "isAvailable": False})
    history = [{"role": "user" if n % 2 == 0 else "assistant", "content": f"turn {n}"} for n in range(14)]

    response = TestClient(app).post(
        f"/api/restaurants/{restaurant['id']}/chat",
        json={"message": "What do you recommend?", "history": history},
    )

    assert response.status_code == 200
    assert response.json() == {"reply": "Try the Falafel Wrap for AED 32.00."}
    call = provider.calls[-1]
    assert "Falafel Wrap" in call["system"]
    assert "Gone" not in call["system"]
    assert "Casa Verde" in call["system"]
    assert len(call["messages"]) == 11
    assert call["messages"][0]["content"] == "turn 4"
    assert call["messages"][-1] == {"role": "user", "content": "What do you recommend?"}
    assert call["max_tokens"] == 500


def test_chat_for_unknown_restaurant_is_404():
    response = TestClient(_build_app()).post("/api/restaurants/999/chat", json={"message": "hi"})

    assert response.status_code == 404


def test_storage_failure_is_opaque_503(monkeypatch):
    from sqlalchemy.exc import OperationalError
    from sqlalchemy.orm import Session

    client = _signed_in(_build_app())

    def _broken_query(self, *entities, **kwargs):
        raise OperationalError("SELECT", {}, Exception("could not connect to server at 10.0.0.5"))

    monkeypatch.setattr(Session, "query", _broken_query)
    response = client.get("/api/public/menu/casa-verde")

    assert response.status_code == 503
    assert "10.0.0.5" not in response.json()["message"]
