from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status

from qrmenu.core.errors import ConflictError, NotFoundError
from qrmenu.deps import ensure_restaurant_owner, get_storage, require_user_id
from qrmenu.schemas.menus import MenuWithItems
from qrmenu.schemas.restaurants import RestaurantOut, SlugAvailability
from qrmenu.schemas.validation import validate_restaurant_create, validate_restaurant_update
from qrmenu.services.slugs import normalize_slug, suggest_unique_slug
from qrmenu.services.storage import Storage

router = APIRouter(prefix="/api/restaurants", tags=["restaurants"])
logger = logging.getLogger(__name__)


def _slug_taken(slug: str) -> ConflictError:
    logger.info("slug conflict slug=%s", slug)
    return ConflictError("Restaurant slug already exists", field="slug")


@router.post("", response_model=RestaurantOut, status_code=status.HTTP_201_CREATED)
def create_restaurant(
    payload: dict[str, Any] = Body(...),
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    data = validate_restaurant_create(payload)
    if storage.get_restaurant_by_slug(data.slug) is not None:
        raise _slug_taken(data.slug)
    restaurant = storage.create_restaurant(user_id, data)
    logger.info("restaurant created id=%s slug=%s", restaurant.id, restaurant.slug, extra={"restaurant_id": restaurant.id})
    return RestaurantOut.model_validate(restaurant)


@router.get("", response_model=list[RestaurantOut])
def list_my_restaurants(
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    return [RestaurantOut.model_validate(row) for row in storage.list_restaurants_by_owner(user_id)]


@router.get("/slug-availability", response_model=SlugAvailability)
def slug_availability(
    slug: str = Query(..., min_length=1),
    storage: Storage = Depends(get_storage),
):
    def _taken(candidate: str) -> bool:
        return storage.get_restaurant_by_slug(candidate) is not None

    normalized = normalize_slug(slug)
    available = bool(normalized) and not _taken(normalized)
    suggestion = None if available else suggest_unique_slug(slug, _taken)
    return SlugAvailability(slug=normalized, available=available, suggestion=suggestion)


@router.get("/slug/{slug}", response_model=RestaurantOut)
def get_restaurant_by_slug(slug: str, storage: Storage = Depends(get_storage)):
    restaurant = storage.get_restaurant_by_slug(slug.strip().lower())
    if restaurant is None:
        raise NotFoundError("Restaurant not found")
    return RestaurantOut.model_validate(restaurant)


@router.get("/{restaurant_id}", response_model=RestaurantOut)
def get_restaurant(restaurant_id: int, storage: Storage = Depends(get_storage)):
    restaurant = storage.get_restaurant_by_id(restaurant_id)
    if restaurant is None:
        raise NotFoundError("Restaurant not found")
    return RestaurantOut.model_validate(restaurant)


@router.patch("/{restaurant_id}", response_model=RestaurantOut)
def update_restaurant(
    restaurant_id: int,
    payload: dict[str, Any] = Body(...),
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    restaurant = ensure_restaurant_owner(storage, restaurant_id, user_id)
    patch = validate_restaurant_update(payload)
    if patch.slug is not None and patch.slug != restaurant.slug:
        if storage.get_restaurant_by_slug(patch.slug) is not None:
            raise _slug_taken(patch.slug)
    updated = storage.update_restaurant(restaurant_id, patch)
    if updated is None:
        raise NotFoundError("Restaurant not found")
    return RestaurantOut.model_validate(updated)


@router.get("/{restaurant_id}/menus", response_model=list[MenuWithItems])
def list_restaurant_menus(
    restaurant_id: int,
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    ensure_restaurant_owner(storage, restaurant_id, user_id)
    return storage.list_menus_by_restaurant(restaurant_id)
