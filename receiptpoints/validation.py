"""Validators that check submitted receipts against the receipt schema."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Protocol, Sequence

from receiptpoints.schema import ApiItem, ApiReceipt

_WORD = "0-9A-Za-z_"
_SPACE = r"\t\n\f\r "
_SHORT_DESCRIPTION_PATTERN = rf"\A[{_WORD}{_SPACE}\-]+\Z"
_RETAILER_PATTERN = rf"\A[{_WORD}{_SPACE}\-&]+\Z"
_AMOUNT_PATTERN = r"\A[0-9]+\.[0-9]{2}\Z"
_CLOCK = re.compile(r"([0-9]{1,2}):([0-9]{2})")


class ItemValidator(Protocol):
    def is_valid(self, item: ApiItem) -> bool: ...


class ReceiptValidator(Protocol):
    def is_valid(self, receipt: ApiReceipt) -> bool: ...


class RegexItemValidator:
    """Checks that a string taken from an item matches a pattern."""

    def __init__(self, pattern: str, get_string: Callable[[ApiItem], str]) -> None:
        self.pattern = re.compile(pattern)
        self.get_string = get_string

    def is_valid(self, item: ApiItem) -> bool:
        return self.pattern.search(self.get_string(item)) is not None


class RegexReceiptValidator:
    """Checks that a string taken from a receipt matches a pattern."""

    def __init__(self, pattern: str, get_string: Callable[[ApiReceipt], str]) -> None:
        self.pattern = re.compile(pattern)
        self.get_string = get_string

    def is_valid(self, receipt: ApiReceipt) -> bool:
        return self.pattern.search(self.get_string(receipt)) is not None


def short_description_item_validator() -> RegexItemValidator:
    return RegexItemValidator(_SHORT_DESCRIPTION_PATTERN, lambda item: item.short_description)


def price_item_validator() -> RegexItemValidator:
    return RegexItemValidator(_AMOUNT_PATTERN, lambda item: item.price)


def retailer_receipt_validator() -> RegexReceiptValidator:
    return RegexReceiptValidator(_RETAILER_PATTERN, lambda receipt: receipt.retailer)


def total_receipt_validator() -> RegexReceiptValidator:
    return RegexReceiptValidator(_AMOUNT_PATTERN, lambda receipt: receipt.total)


class PurchaseTimeReceiptValidator:
    """Accepts a 24-hour H:MM or HH:MM purchase time."""

    def is_valid(self, receipt: ApiReceipt) -> bool:
        match = _CLOCK.fullmatch(receipt.purchase_time)
        if match is None:
            return False
        hour, minute = (int(part) for part in match.groups())
        return hour <= 23 and minute <= 59


@dataclass
class ItemValidationEngine:
    """Passes an item only if every item validator passes it."""

    validators: Sequence[ItemValidator] = field(
        default_factory=lambda: [short_description_item_validator(), price_item_validator()]
    )

    def is_valid(self, item: ApiItem) -> bool:
        return all(validator.is_valid(item) for validator in self.validators)


class ItemsReceiptValidator:
    """Requires at least one item, and every item to be valid."""

    def is_valid(self, receipt: ApiReceipt) -> bool:
        if not receipt.items:
            return False
        engine = ItemValidationEngine()
        return all(engine.is_valid(item) for item in receipt.items)


@dataclass
class ReceiptValidationEngine:
    """Passes a receipt only if every receipt validator passes it."""

    validators: Sequence[ReceiptValidator] = field(
        default_factory=lambda: [
            retailer_receipt_validator(),
            PurchaseTimeReceiptValidator(),
            ItemsReceiptValidator(),
            total_receipt_validator(),
        ]
    )

    def is_valid(self, receipt: ApiReceipt) -> bool:
        return all(validator.is_valid(receipt) for validator in self.validators)