"""Receipt domain objects and the rules that award points for them."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime

_ALPHANUMERIC = re.compile(r"[a-zA-Z0-9]")


@dataclass(frozen=True)
class Item:
    """A purchased item; the price is held in cents."""

    short_description: str = ""
    price: int = 0


@dataclass(frozen=True)
class Receipt:
    """A receipt with its total held in cents."""

    retailer: str = ""
    purchase_datetime: datetime = datetime.min
    total: int = 0
    items: tuple[Item, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))


def _div_trunc(numerator: int, denominator: int) -> int:
    """Integer division that truncates toward zero."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


class Rule(ABC):
    """A strategy that awards points for a receipt."""

    @abstractmethod
    def calculate_points(self, receipt: Receipt) -> int:
        """Return the points this rule awards for the receipt."""


class RetailerNameRule(Rule):
    """One point for every alphanumeric character in the retailer name."""

    def calculate_points(self, receipt: Receipt) -> int:
        return len(_ALPHANUMERIC.findall(receipt.retailer))


class RoundDollarRule(Rule):
    """50 points if the total is a round dollar amount with no cents."""

    def calculate_points(self, receipt: Receipt) -> int:
        return 50 if receipt.total % 100 == 0 else 0


class MultipleOfQuarterRule(Rule):
    """25 points if the total is a multiple of 0.25."""

    def calculate_points(self, receipt: Receipt) -> int:
        return 25 if receipt.total % 25 == 0 else 0


class ItemPairRule(Rule):
    """5 points for every two items on the receipt."""

    def calculate_points(self, receipt: Receipt) -> int:
        return len(receipt.items) // 2 * 5


class ItemDescriptionRule(Rule):
    """For items whose trimmed description length is a multiple of 3,
    award 0.2 times the price in dollars, rounded up."""

    def calculate_points(self, receipt: Receipt) -> int:
        points = 0
        for item in receipt.items:
            trimmed_len = len(item.short_description.strip().encode("utf-8"))
            if trimmed_len % 3 == 0:
                points += _div_trunc(item.price * 20 + 10000 - 1, 10000)
        return points


class OddDayRule(Rule):
    """6 points if the day in the purchase date is odd."""

    def calculate_points(self, receipt: Receipt) -> int:
        return 6 if receipt.purchase_datetime.day % 2 == 1 else 0


class AfternoonPurchaseRule(Rule):
    """10 points if the purchase happened from 14:00 up to 15:59."""

    def calculate_points(self, receipt: Receipt) -> int:
        return 10 if receipt.purchase_datetime.hour in (14, 15) else 0


def _default_rules() -> tuple[Rule, ...]:
    return (
        RetailerNameRule(),
        RoundDollarRule(),
        MultipleOfQuarterRule(),
        ItemPairRule(),
        ItemDescriptionRule(),
        OddDayRule(),
        AfternoonPurchaseRule(),
    )


@dataclass(frozen=True)
class RulesEngine:
    """Applies every rule to a receipt and sums the points."""

    rules: tuple[Rule, ...] = field(default_factory=_default_rules)

    def calculate_total_points(self, receipt: Receipt) -> int:
        return sum(rule.calculate_points(receipt) for rule in self.rules)