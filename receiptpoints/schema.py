"""Wire-level receipt and item shapes, as submitted by clients."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

_DATE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")


class SchemaError(ValueError):
    """Raised when submitted data does not have the receipt schema's shape."""


@dataclass(frozen=True)
class ApiItem:
    """An item as submitted: the price is a decimal string."""

    short_description: str = ""
    price: str = ""


@dataclass(frozen=True)
class ApiReceipt:
    """A receipt as submitted, before validation and mapping."""

    retailer: str = ""
    purchase_date: date = date.min
    purchase_time: str = ""
    items: tuple[ApiItem, ...] = ()
    total: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))


def _require_mapping(data: Any, what: str) -> Mapping:
    if not isinstance(data, Mapping):
        raise SchemaError(f"{what} must be an object")
    return data


def _string_field(data: Mapping, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise SchemaError(f"field {key!r} must be a string")
    return value


def _parse_date(value: Any) -> date:
    if not isinstance(value, str):
        raise SchemaError("field 'purchaseDate' must be a date string")
    match = _DATE.fullmatch(value)
    if match is None:
        raise SchemaError(f"invalid purchaseDate: {value!r}")
    try:
        return date(*(int(part) for part in match.groups()))
    except ValueError as exc:
        raise SchemaError(f"invalid purchaseDate: {value!r}") from exc


def parse_item(data: Any) -> ApiItem:
    """Build an ApiItem from a decoded JSON object."""
    mapping = _require_mapping(data, "item")
    return ApiItem(
        short_description=_string_field(mapping, "shortDescription"),
        price=_string_field(mapping, "price"),
    )


def parse_receipt(data: Any) -> ApiReceipt:
    """Build an ApiReceipt from a decoded JSON object."""
    mapping = _require_mapping(data, "receipt")
    if "purchaseDate" not in mapping:
        raise SchemaError("missing required field 'purchaseDate'")
    raw_items = mapping.get("items")
    if raw_items is None:
        raw_items = []
    if not isinstance(raw_items, list):
        raise SchemaError("field 'items' must be an array")
    return ApiReceipt(
        retailer=_string_field(mapping, "retailer"),
        purchase_date=_parse_date(mapping["purchaseDate"]),
        purchase_time=_string_field(mapping, "purchaseTime"),
        items=tuple(parse_item(raw) for raw in raw_items),
        total=_string_field(mapping, "total"),
    )