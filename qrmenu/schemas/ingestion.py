from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, field_validator

from qrmenu.schemas.common import CamelModel, clean_optional_text, require_text
from qrmenu.schemas.menu_items import MenuItemDraft

DEFAULT_TONE = "standard"


class GenerateMenuRequest(CamelModel):
    restaurant_id: int
    cuisine: str
    tone: str = DEFAULT_TONE

    @field_validator("cuisine", mode="before")
    @classmethod
    def validate_cuisine(cls, value: Any) -> Any:
        return require_text(value, "Cuisine")

    @field_validator("tone", mode="before")
    @classmethod
    def default_tone(cls, value: Any) -> Any:
        return clean_optional_text(value) or DEFAULT_TONE


class MenuDraft(CamelModel):
    name: str
    description: str = ""
    items: list[MenuItemDraft] = Field(default_factory=list)
    skipped_items: int = 0


class ImportMenuRequest(CamelModel):
    restaurant_id: int
    name: str
    description: Optional[str] = None
    is_active: bool = True
    items: list[MenuItemDraft] = Field(default_factory=list)

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
