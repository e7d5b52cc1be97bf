"""
Immutable record types for menu items, order lines and derived report rows.
"""
from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import Optional, Union

Identifier = Union[int, str]

CENT = Decimal('0.01')


def cents_to_decimal(cents):
    """Convert an integer amount of cents into a two-place Decimal."""
    return (Decimal(int(cents)) / 100).quantize(CENT)


@dataclass(frozen=True)
class MenuItem:
    """A dish on the menu."""
    item_id: Identifier
    item_name: str
    category: str
    price: Decimal

    def __post_init__(self):
        if self.price < 0:
            raise ValueError(f"price must be non-negative, got {self.price}")


@dataclass(frozen=True)
class OrderLine:
    """
    One ordered line item.

    `item_id` is None when the source recorded the line without a dish.
    """
    order_id: Identifier
    order_date: date
    order_time: time
    item_id: Optional[Identifier]
    order_details_id: Optional[Identifier] = None


@dataclass(frozen=True)
class OrderLineDetail:
    """An order line joined with the menu item it references."""
    line: OrderLine
    item: MenuItem

    @property
    def order_id(self):
        return self.line.order_id

    @property
    def price(self):
        return self.item.price

    @property
    def category(self):
        return self.item.category


@dataclass(frozen=True)
class ItemStat:
    item: MenuItem
    times_ordered: int
    total_revenue: Decimal
