from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, field_validator

from qrmenu.schemas.common import CamelModel
from qrmenu.schemas.menu_items import MenuItemOut
from qrmenu.schemas.restaurants import DEFAULT_TABLE_COUNT


class PublicRestaurant(CamelModel):
    """Restaurant fields safe to show customers (no owner id)."""

    id: int
    name: str
    slug: str
    address: Optional[str] = None
    contact_number: Optional[str] = None
    whatsapp_number: Optional[str] = None
    cuisine_type: Optional[str] = None
    description: Optional[str] = None
    cover_image: Optional[str] = None
    table_count: int = DEFAULT_TABLE_COUNT

    @field_validator("table_count", mode="before")
    @classmethod
    def default_missing_table_count(cls, value: Any) -> Any:
        return DEFAULT_TABLE_COUNT if value is None else value


class PublicMenuSummary(CamelModel):
    id: int
    name: str
    description: Optional[str] = None


class PublicMenuCategory(CamelModel):
    name: str
    items: list[MenuItemOut] = Field(default_factory=list)


class PublicMenuResponse(CamelModel):
    restaurant: PublicRestaurant
    menu: Optional[PublicMenuSummary] = None
    categories: list[PublicMenuCategory] = Field(default_factory=list)
    table: Optional[int] = None
