from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from qrmenu.deps import get_storage
from qrmenu.schemas.public import PublicMenuResponse, PublicRestaurant
from qrmenu.services.public_menu import build_public_menu, list_public_restaurants
from qrmenu.services.storage import Storage

router = APIRouter(prefix="/api/public", tags=["public-menu"])


@router.get("/restaurants", response_model=list[PublicRestaurant])
def discover_restaurants(storage: Storage = Depends(get_storage)):
    return list_public_restaurants(storage)


@router.get("/menu/{slug}", response_model=PublicMenuResponse)
def public_menu(
    slug: str,
    table: Optional[str] = Query(default=None),
    storage: Storage = Depends(get_storage),
):
    return build_public_menu(storage, slug, table)
