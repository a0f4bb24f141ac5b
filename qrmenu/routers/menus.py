from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile, status

from qrmenu.ai.base import TextProvider
from qrmenu.ai.service import get_generation_provider
from qrmenu.core.config import MAX_UPLOAD_BYTES
from qrmenu.core.errors import NotFoundError
from qrmenu.deps import ensure_menu_owner, ensure_restaurant_owner, get_storage, require_user_id
from qrmenu.schemas.ingestion import MenuDraft
from qrmenu.schemas.menus import MenuOut, MenuWithItems
from qrmenu.schemas.validation import (
    validate_generate_request,
    validate_import_request,
    validate_menu_create,
    validate_menu_update,
)
from qrmenu.services.ingestion import extract_menu_draft, generate_menu_draft, import_menu_draft
from qrmenu.services.storage import Storage

router = APIRouter(prefix="/api/menus", tags=["menus"])
logger = logging.getLogger(__name__)


@router.post("", response_model=MenuOut, status_code=status.HTTP_201_CREATED)
def create_menu(
    payload: dict[str, Any] = Body(...),
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    data = validate_menu_create(payload)
    ensure_restaurant_owner(storage, data.restaurant_id, user_id)
    menu = storage.create_menu(data)
    return MenuOut.model_validate(menu)


@router.post("/generate", response_model=MenuDraft)
def generate_menu(
    payload: dict[str, Any] = Body(...),
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
    provider: TextProvider = Depends(get_generation_provider),
):
    request = validate_generate_request(payload)
    ensure_restaurant_owner(storage, request.restaurant_id, user_id)
    return generate_menu_draft(provider, request)


@router.post("/upload", response_model=MenuDraft)
def upload_menu_file(
    file: UploadFile = File(...),
    restaurant_id: int = Form(..., alias="restaurantId"),
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
    provider: TextProvider = Depends(get_generation_provider),
):
    ensure_restaurant_owner(storage, restaurant_id, user_id)
    # One byte past the limit is enough to reject oversized uploads.
    data = file.file.read(MAX_UPLOAD_BYTES + 1)
    return extract_menu_draft(provider, file.filename, file.content_type, data)


@router.post("/import", response_model=MenuWithItems, status_code=status.HTTP_201_CREATED)
def import_menu(
    payload: dict[str, Any] = Body(...),
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    request = validate_import_request(payload)
    ensure_restaurant_owner(storage, request.restaurant_id, user_id)
    menu = import_menu_draft(storage, request)
    logger.info(
        "[INGESTION] imported menu id=%s items=%s",
        menu.id,
        len(menu.items),
        extra={"restaurant_id": request.restaurant_id},
    )
    return menu


@router.get("/{menu_id}", response_model=MenuWithItems)
def get_menu(
    menu_id: int,
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    ensure_menu_owner(storage, menu_id, user_id)
    menu = storage.get_menu_by_id(menu_id)
    if menu is None:
        raise NotFoundError("Menu not found")
    return menu


@router.patch("/{menu_id}", response_model=MenuOut)
def update_menu(
    menu_id: int,
    payload: dict[str, Any] = Body(...),
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    ensure_menu_owner(storage, menu_id, user_id)
    patch = validate_menu_update(payload)
    menu = storage.update_menu(menu_id, patch)
    if menu is None:
        raise NotFoundError("Menu not found")
    return MenuOut.model_validate(menu)
