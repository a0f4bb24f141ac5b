from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_PRICE_PATTERN = re.compile(
    r"^(?:(?:aed|dhs?)\.?\s*)?(\d{1,3}(?:,\d{3})+|\d+)(?:\.(\d+))?(?:\s*(?:aed|dhs?)\.?)?$",
    re.IGNORECASE,
)
_CENT = Decimal("0.01")


class CamelModel(BaseModel):
    """Accepts camelCase (wire format), snake_case keys or ORM rows; dumps camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def parse_price(value: Any) -> Decimal:
    """Parse a currency amount such as ``45``, ``"45.5"``, ``"AED 1,250.00"``.

    Raises ValueError for anything that is not a plain non-negative amount.
    """
    if value is None or isinstance(value, bool):
        raise ValueError("Price must be a numeric amount, e.g. 45.00")
    if isinstance(value, (int, float, Decimal)):
        text = format(Decimal(str(value)), "f")
    elif isinstance(value, str):
        text = value.strip()
    else:
        raise ValueError("Price must be a numeric amount, e.g. 45.00")

    match = _PRICE_PATTERN.match(text)
    if not match:
        raise ValueError("Price must be a numeric amount, e.g. 45.00")
    whole = match.group(1).replace(",", "")
    fraction = match.group(2) or "0"
    return Decimal(f"{whole}.{fraction}").quantize(_CENT, rounding=ROUND_HALF_UP)


def normalize_price(value: Any) -> str:
    return f"{parse_price(value):.2f}"


def price_to_minor(price: str) -> int:
    return int(parse_price(price) * 100)


def clean_optional_text(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def require_text(value: Any, label: str) -> Any:
    if value is None:
        raise ValueError(f"{label} is required")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError(f"{label} cannot be empty")
    return value
