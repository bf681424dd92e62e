from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Tuple, Union

GemId = Union[int, str]

PERCENTAGE = "percentage"
FIXED = "fixed"
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class NoDiscount:
    pass


@dataclass(frozen=True)
class PercentageDiscount:
    percent: Decimal


@dataclass(frozen=True)
class FixedDiscount:
    amount: Decimal


Discount = Union[NoDiscount, PercentageDiscount, FixedDiscount]

NO_DISCOUNT = NoDiscount()


def discount_from_fields(discount, discount_type: Optional[str]) -> Discount:
    """
    Build the discount variant from the catalogue's loose `discount` /
    `discountType` pair. Anything but a positive discount means no discount;
    only "percentage" is special-cased, every other type is a fixed amount.
    """
    if discount is None:
        return NO_DISCOUNT
    value = Decimal(str(discount))
    if value <= 0:
        return NO_DISCOUNT
    if discount_type == PERCENTAGE:
        # anything past 100% already floors the price at zero
        return PercentageDiscount(min(value, HUNDRED))
    return FixedDiscount(value)


def discount_to_fields(discount: Discount) -> Tuple[Optional[Decimal], Optional[str]]:
    if isinstance(discount, PercentageDiscount):
        return discount.percent, PERCENTAGE
    if isinstance(discount, FixedDiscount):
        return discount.amount, FIXED
    return None, None


@dataclass(frozen=True)
class LineItem:
    """
    One cart row: a gem snapshot plus the requested quantity.
    Price and discount are captured when the gem is added and never refreshed.
    """
    id: GemId
    unit_price: Decimal
    quantity: int
    name: str = ""
    category: str = ""
    discount: Discount = field(default=NO_DISCOUNT)
    image: Optional[str] = None
