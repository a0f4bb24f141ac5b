from __future__ import annotations

from typing import Any, Optional

from pydantic import ValidationInfo, field_validator

from qrmenu.schemas.common import CamelModel, clean_optional_text, normalize_price, require_text

_FLAG_DEFAULTS = {
    "is_available": True,
    "is_bestseller": False,
    "is_chefs_pick": False,
    "is_todays_special": False,
}


class MenuItemDraft(CamelModel):
    """Item shape shared by manual creation and AI drafts (no menu yet)."""

    name: str
    description: Optional[str] = None
    price: str
    category: str
    image_url: Optional[str] = None
    is_available: bool = True
    is_bestseller: bool = False
    is_chefs_pick: bool = False
    is_todays_special: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, value: Any) -> Any:
        return require_text(value, "Name")

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, value: Any) -> Any:
        return require_text(value, "Category")

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, value: Any) -> str:
        return normalize_price(value)

    @field_validator("description", "image_url", mode="before")
    @classmethod
    def clean_optional(cls, value: Any) -> Any:
        return clean_optional_text(value)

    @field_validator("is_available", "is_bestseller", "is_chefs_pick", "is_todays_special", mode="before")
    @classmethod
    def default_missing_flag(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return _FLAG_DEFAULTS[info.field_name]
        return value


class MenuItemCreate(MenuItemDraft):
    menu_id: int


class MenuItemUpdate(CamelModel):
    menu_id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_available: Optional[bool] = None
    is_bestseller: Optional[bool] = None
    is_chefs_pick: Optional[bool] = None
    is_todays_special: Optional[bool] = None

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, value: Any) -> Any:
        return require_text(value, "Name")

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, value: Any) -> Any:
        return require_text(value, "Category")

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, value: Any) -> str:
        return normalize_price(value)

    @field_validator("description", "image_url", mode="before")
    @classmethod
    def clean_optional(cls, value: Any) -> Any:
        return clean_optional_text(value)

    @field_validator(
        "menu_id",
        "is_available",
        "is_bestseller",
        "is_chefs_pick",
        "is_todays_special",
        mode="before",
    )
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("Value cannot be null")
        return value

    def changes(self) -> dict[str, Any]:
        """Only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)


class MenuItemOut(CamelModel):
    id: int
    menu_id: int
    name: str
    description: Optional[str] = None
    price: str
    price_minor: Optional[int] = None
    category: str
    image_url: Optional[str] = None
    is_available: bool = True
    is_bestseller: bool = False
    is_chefs_pick: bool = False
    is_todays_special: bool = False
    position: int = 0

    @field_validator("is_available", "is_bestseller", "is_chefs_pick", "is_todays_special", mode="before")
    @classmethod
    def default_missing_flag(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return _FLAG_DEFAULTS[info.field_name]
        return value

    @field_validator("position", mode="before")
    @classmethod
    def default_position(cls, value: Any) -> Any:
        return 0 if value is None else value
