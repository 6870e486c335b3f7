"""Mappers that turn submitted receipts and items into domain objects."""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Protocol

from receiptpoints.rules import Item, Receipt
from receiptpoints.schema import ApiItem, ApiReceipt, SchemaError, parse_item

_NUMBER = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_PURCHASE_DATETIME = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2}) ([0-9]{1,2}):([0-9]{2})"
)


class MappingError(ValueError):
    """Raised when a source object cannot be mapped to a domain object."""


class _ItemMapper(Protocol):
    def to_domain(self, source: Any) -> Item: ...


class _ReceiptMapper(Protocol):
    def to_domain(self, source: Any) -> Receipt: ...


def convert_to_cents(amount: str) -> int:
    """Convert a decimal dollar amount string to whole cents, rounding half away from zero."""
    if not isinstance(amount, str) or _NUMBER.fullmatch(amount) is None:
        raise MappingError(f"invalid amount: {amount!r}")
    cents = float(amount) * 100
    if not math.isfinite(cents):
        raise MappingError(f"amount out of range: {amount!r}")
    return int(Decimal(cents).to_integral_value(rounding=ROUND_HALF_UP))


def _parse_purchase_datetime(purchase_date: str, purchase_time: str) -> datetime:
    combined = f"{purchase_date} {purchase_time}"
    match = _PURCHASE_DATETIME.fullmatch(combined)
    if match is None:
        raise MappingError(f"cannot parse purchase date and time: {combined!r}")
    try:
        return datetime(*(int(part) for part in match.groups()))
    except ValueError as exc:
        raise MappingError(f"invalid purchase date and time: {combined!r}") from exc


def _decode_json(source: Any) -> Any:
    if not isinstance(source, (bytes, bytearray, str)):
        raise MappingError(f"expected raw JSON, got {type(source).__name__}")
    try:
        return json.loads(source)
    except ValueError as exc:
        raise MappingError(f"invalid JSON: {exc}") from exc


def _json_string(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MappingError(f"field {key!r} must be a string")
    return value


class ApiItemMapper:
    """Maps an ApiItem to a domain Item."""

    def to_domain(self, source: ApiItem) -> Item:
        return Item(
            short_description=source.short_description,
            price=convert_to_cents(source.price),
        )


@dataclass
class ApiReceiptMapper:
    """Maps an ApiReceipt to a domain Receipt, using an injected item mapper."""

    item_mapper: _ItemMapper = field(default_factory=ApiItemMapper)

    def to_domain(self, source: ApiReceipt) -> Receipt:
        purchase = _parse_purchase_datetime(
            source.purchase_date.isoformat(), source.purchase_time
        )
        total = convert_to_cents(source.total)
        items = tuple(self.item_mapper.to_domain(item) for item in source.items)
        return Receipt(
            retailer=source.retailer,
            purchase_datetime=purchase,
            total=total,
            items=items,
        )


class JsonItemMapper:
    """Maps a raw JSON item to a domain Item."""

    def to_domain(self, source: bytes) -> Item:
        data = _decode_json(source)
        if data is None:
            data = {}
        try:
            api_item = parse_item(data)
        except SchemaError as exc:
            raise MappingError(str(exc)) from exc
        return Item(
            short_description=api_item.short_description,
            price=convert_to_cents(api_item.price),
        )


@dataclass
class JsonReceiptMapper:
    """Maps a raw JSON receipt to a domain Receipt, using an injected item mapper."""

    item_mapper: _ItemMapper = field(default_factory=JsonItemMapper)

    def to_domain(self, source: bytes) -> Receipt:
        data = _decode_json(source)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise MappingError("receipt must be a JSON object")
        retailer = _json_string(data, "retailer")
        purchase_date = _json_string(data, "purchaseDate")
        purchase_time = _json_string(data, "purchaseTime")
        total_text = _json_string(data, "total")
        raw_items = data.get("items")
        if raw_items is None:
            raw_items = []
        if not isinstance(raw_items, list):
            raise MappingError("field 'items' must be an array")

        purchase = _parse_purchase_datetime(purchase_date, purchase_time)
        total = convert_to_cents(total_text)
        items = tuple(
            self.item_mapper.to_domain(json.dumps(raw).encode("utf-8"))
            for raw in raw_items
        )
        return Receipt(
            retailer=retailer,
            purchase_datetime=purchase,
            total=total,
            items=items,
        )


class MapperFactory:
    """Registry choosing a mapper by the type of the source object."""

    def __init__(self) -> None:
        api_item_mapper = ApiItemMapper()
        json_item_mapper = JsonItemMapper()
        self.item_mappers: dict[type, _ItemMapper] = {
            ApiItem: api_item_mapper,
            bytes: json_item_mapper,
        }
        self.receipt_mappers: dict[type, _ReceiptMapper] = {
            ApiReceipt: ApiReceiptMapper(item_mapper=api_item_mapper),
            bytes: JsonReceiptMapper(item_mapper=json_item_mapper),
        }

    def item_mapper_for(self, source: Any) -> _ItemMapper:
        """Return the item mapper registered for the source's type."""
        try:
            return self.item_mappers[type(source)]
        except KeyError:
            raise MappingError(
                f"Mapper does not exist for type: {type(source).__name__}"
            ) from None

    def receipt_mapper_for(self, source: Any) -> _ReceiptMapper:
        """Return the receipt mapper registered for the source's type."""
        try:
            return self.receipt_mappers[type(source)]
        except KeyError:
            raise MappingError(
                f"Mapper does not exist for type: {type(source).__name__}"
            ) from None


_factory = MapperFactory()


def map_to_item(source: Any) -> Item:
    """Map an ApiItem or raw JSON bytes to a domain Item."""
    return _factory.item_mapper_for(source).to_domain(source)


def map_to_receipt(source: Any) -> Receipt:
    """Map an ApiReceipt or raw JSON bytes to a domain Receipt."""
    return _factory.receipt_mapper_for(source).to_domain(source)