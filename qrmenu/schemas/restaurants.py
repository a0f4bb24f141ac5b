from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Optional

from pydantic import field_validator

from qrmenu.schemas.common import CamelModel, clean_optional_text, require_text

DEFAULT_TABLE_COUNT = 10
SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
SLUG_MAX_LENGTH = 80


def _validate_slug(value: Any) -> str:
    value = require_text(value, "Slug")
    if not isinstance(value, str):
        raise ValueError("Slug must be text")
    value = value.lower()
    if len(value) > SLUG_MAX_LENGTH:
        raise ValueError(f"Slug must be at most {SLUG_MAX_LENGTH} characters")
    if not SLUG_PATTERN.match(value):
        raise ValueError("Slug may only contain lowercase letters, digits and single hyphens")
    return value


def _coerce_table_count(value: Any) -> Any:
    if value is None:
        return DEFAULT_TABLE_COUNT
    return value


class RestaurantCreate(CamelModel):
    name: str
    slug: str
    address: Optional[str] = None
    contact_number: Optional[str] = None
    whatsapp_number: Optional[str] = None
    cuisine_type: Optional[str] = None
    description: Optional[str] = None
    cover_image: Optional[str] = None
    table_count: int = DEFAULT_TABLE_COUNT

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, value: Any) -> Any:
        return require_text(value, "Name")

    @field_validator("slug", mode="before")
    @classmethod
    def validate_slug(cls, value: Any) -> str:
        return _validate_slug(value)

    @field_validator(
        "address",
        "contact_number",
        "whatsapp_number",
        "cuisine_type",
        "description",
        "cover_image",
        mode="before",
    )
    @classmethod
    def clean_optional(cls, value: Any) -> Any:
        return clean_optional_text(value)

    @field_validator("table_count", mode="before")
    @classmethod
    def default_missing_table_count(cls, value: Any) -> Any:
        return _coerce_table_count(value)

    @field_validator("table_count")
    @classmethod
    def default_non_positive_table_count(cls, value: int) -> int:
        return value if value >= 1 else DEFAULT_TABLE_COUNT


class RestaurantUpdate(CamelModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    address: Optional[str] = None
    contact_number: Optional[str] = None
    whatsapp_number: Optional[str] = None
    cuisine_type: Optional[str] = None
    description: Optional[str] = None
    cover_image: Optional[str] = None
    table_count: Optional[int] = None

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, value: Any) -> Any:
        return require_text(value, "Name")

    @field_validator("slug", mode="before")
    @classmethod
    def validate_slug(cls, value: Any) -> str:
        return _validate_slug(value)

    @field_validator(
        "address",
        "contact_number",
        "whatsapp_number",
        "cuisine_type",
        "description",
        "cover_image",
        mode="before",
    )
    @classmethod
    def clean_optional(cls, value: Any) -> Any:
        return clean_optional_text(value)

    @field_validator("table_count", mode="before")
    @classmethod
    def reject_null_table_count(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("Table count cannot be null")
        return value

    @field_validator("table_count")
    @classmethod
    def default_non_positive_table_count(cls, value: Optional[int]) -> Optional[int]:
        if value is None:
            return value
        return value if value >= 1 else DEFAULT_TABLE_COUNT


class RestaurantOut(CamelModel):
    id: int
    owner_id: int
    name: str
    slug: str
    address: Optional[str] = None
    contact_number: Optional[str] = None
    whatsapp_number: Optional[str] = None
    cuisine_type: Optional[str] = None
    description: Optional[str] = None
    cover_image: Optional[str] = None
    table_count: int = DEFAULT_TABLE_COUNT
    created_at: Optional[datetime] = None

    @field_validator("table_count", mode="before")
    @classmethod
    def default_missing_table_count(cls, value: Any) -> Any:
        return _coerce_table_count(value)


class SlugAvailability(CamelModel):
    slug: str
    available: bool
    suggestion: Optional[str] = None
