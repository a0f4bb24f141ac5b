from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Response, status

from qrmenu.core.errors import NotFoundError
from qrmenu.deps import ensure_menu_item_owner, ensure_menu_owner, get_storage, require_user_id
from qrmenu.schemas.menu_items import MenuItemOut
from qrmenu.schemas.validation import validate_menu_item_create, validate_menu_item_update
from qrmenu.services.storage import Storage

router = APIRouter(prefix="/api/menu-items", tags=["menu-items"])


@router.post("", response_model=MenuItemOut, status_code=status.HTTP_201_CREATED)
def create_menu_item(
    payload: dict[str, Any] = Body(...),
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    data = validate_menu_item_create(payload)
    ensure_menu_owner(storage, data.menu_id, user_id)
    return MenuItemOut.model_validate(storage.create_menu_item(data))


@router.patch("/{item_id}", response_model=MenuItemOut)
def update_menu_item(
    item_id: int,
    payload: dict[str, Any] = Body(...),
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    if ensure_menu_item_owner(storage, item_id, user_id) is None:
        raise NotFoundError("Menu item not found")
    patch = validate_menu_item_update(payload)
    if patch.menu_id is not None:
        ensure_menu_owner(storage, patch.menu_id, user_id)
    item = storage.update_menu_item(item_id, patch)
    if item is None:
        raise NotFoundError("Menu item not found")
    return MenuItemOut.model_validate(item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(
    item_id: int,
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    # Deleting an id that is already gone is a no-op.
    if ensure_menu_item_owner(storage, item_id, user_id) is not None:
        storage.delete_menu_item(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
