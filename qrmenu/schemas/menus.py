from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from qrmenu.schemas.common import CamelModel, clean_optional_text, require_text
from qrmenu.schemas.menu_items import MenuItemOut


class MenuCreate(CamelModel):
    restaurant_id: int
    name: str
    description: Optional[str] = None
    is_active: bool = True

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, value: Any) -> Any:
        return require_text(value, "Name")

    @field_validator("description", mode="before")
    @classmethod
    def clean_description(cls, value: Any) -> Any:
        return clean_optional_text(value)

    @field_validator("is_active", mode="before")
    @classmethod
    def default_is_active(cls, value: Any) -> Any:
        return True if value is None else value


class MenuUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
    position: Optional[int] = Field(default=None, ge=0)

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, value: Any) -> Any:
        return require_text(value, "Name")

    @field_validator("description", mode="before")
    @classmethod
    def clean_description(cls, value: Any) -> Any:
        return clean_optional_text(value)

    @field_validator("is_active", "position", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("Value cannot be null")
        return value


class MenuOut(CamelModel):
    id: int
    restaurant_id: int
    name: str
    description: Optional[str] = None
    is_active: bool = True
    position: int = 0
    created_at: Optional[datetime] = None

    @field_validator("is_active", mode="before")
    @classmethod
    def default_is_active(cls, value: Any) -> Any:
        return True if value is None else value

    @field_validator("position", mode="before")
    @classmethod
    def default_position(cls, value: Any) -> Any:
        return 0 if value is None else value


class MenuWithItems(MenuOut):
    items: list[MenuItemOut] = Field(default_factory=list)
