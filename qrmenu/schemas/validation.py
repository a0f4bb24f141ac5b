"""Input gate for every write.

Each ``validate_*`` function takes a plain mapping (decoded JSON, form fields,
or a provider draft) and returns a typed record, or raises
``qrmenu.core.errors.ValidationError`` describing the first failing field.
Validation is not accumulating: only the first violation is reported.
"""
from __future__ import annotations

from typing import Any, Mapping, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from qrmenu.core.errors import ValidationError
from qrmenu.schemas.chat import ChatRequest
from qrmenu.schemas.ingestion import GenerateMenuRequest, ImportMenuRequest
from qrmenu.schemas.menu_items import MenuItemCreate, MenuItemDraft, MenuItemUpdate
from qrmenu.schemas.menus import MenuCreate, MenuUpdate
from qrmenu.schemas.restaurants import RestaurantCreate, RestaurantUpdate
from qrmenu.schemas.users import NewUser, UserCredentials
from qrmenu.services.passwords import hash_password

ModelT = TypeVar("ModelT", bound=BaseModel)

_VALUE_ERROR_PREFIX = "Value error, "


def _first_error(exc: PydanticValidationError) -> ValidationError:
    errors = exc.errors()
    if not errors:
        return ValidationError("Invalid input")
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or None
    message = str(first.get("msg") or "Invalid input")
    if message.startswith(_VALUE_ERROR_PREFIX):
        message = message[len(_VALUE_ERROR_PREFIX):]
    if first.get("type") == "missing" and field:
        message = f"{field} is required"
    return ValidationError(message, field=field)


def _validate(model: type[ModelT], data: Any) -> ModelT:
    if not isinstance(data, Mapping):
        raise ValidationError("Expected a JSON object")
    try:
        return model.model_validate(dict(data))
    except PydanticValidationError as exc:
        raise _first_error(exc) from None


def validate_credentials(data: Any) -> UserCredentials:
    return _validate(UserCredentials, data)


def validate_user_create(data: Any) -> NewUser:
    credentials = _validate(UserCredentials, data)
    return NewUser(username=credentials.username, password_hash=hash_password(credentials.password))


def validate_restaurant_create(data: Any) -> RestaurantCreate:
    return _validate(RestaurantCreate, data)


def validate_restaurant_update(data: Any) -> RestaurantUpdate:
    return _validate(RestaurantUpdate, data)


def validate_menu_create(data: Any) -> MenuCreate:
    return _validate(MenuCreate, data)


def validate_menu_update(data: Any) -> MenuUpdate:
    return _validate(MenuUpdate, data)


def validate_menu_item_create(data: Any) -> MenuItemCreate:
    return _validate(MenuItemCreate, data)


def validate_menu_item_update(data: Any) -> MenuItemUpdate:
    return _validate(MenuItemUpdate, data)


def validate_item_draft(data: Any) -> MenuItemDraft:
    return _validate(MenuItemDraft, data)


def validate_generate_request(data: Any) -> GenerateMenuRequest:
    return _validate(GenerateMenuRequest, data)


def validate_import_request(data: Any) -> ImportMenuRequest:
    return _validate(ImportMenuRequest, data)


def validate_chat_request(data: Any) -> ChatRequest:
    return _validate(ChatRequest, data)
