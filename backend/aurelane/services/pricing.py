from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from aurelane.config import settings
from aurelane.models.line_item import FixedDiscount, LineItem, PercentageDiscount

ZERO = Decimal("0")


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    total_discount: Decimal
    grand_total: Decimal
    item_count: int

    def as_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "totalDiscount": self.total_discount,
            "grandTotal": self.grand_total,
            "itemCount": self.item_count,
        }


@dataclass(frozen=True)
class CartSummary:
    item_count: int
    subtotal: Decimal
    discount: Decimal
    grand_total: Decimal
    shipping: Decimal
    total: Decimal
    free_shipping_threshold: Decimal
    is_eligible_for_free_shipping: bool

    def as_dict(self) -> dict:
        return {
            "itemCount": self.item_count,
            "subtotal": self.subtotal,
            "discount": self.discount,
            "grandTotal": self.grand_total,
            "shipping": self.shipping,
            "total": self.total,
            "freeShippingThreshold": self.free_shipping_threshold,
            "isEligibleForFreeShipping": self.is_eligible_for_free_shipping,
        }


def effective_price(item: LineItem) -> Decimal:
    """Unit price after the item's discount, never below zero."""
    d = item.discount
    if isinstance(d, PercentageDiscount):
        price = item.unit_price - (item.unit_price * d.percent / 100)
    elif isinstance(d, FixedDiscount):
        price = item.unit_price - d.amount
    else:
        price = item.unit_price
    return max(price, ZERO)


def line_total(item: LineItem) -> Decimal:
    return effective_price(item) * item.quantity


def compute_totals(items: Iterable[LineItem]) -> CartTotals:
    subtotal = ZERO
    grand_total = ZERO
    count = 0
    for it in items:
        subtotal += it.unit_price * it.quantity
        grand_total += line_total(it)
        count += it.quantity
    return CartTotals(
        subtotal=subtotal,
        total_discount=subtotal - grand_total,
        grand_total=grand_total,
        item_count=count,
    )


def compute_summary(
    items: Iterable[LineItem],
    free_shipping_threshold: Optional[Decimal] = None,
    shipping_fee: Optional[Decimal] = None,
) -> CartSummary:
    threshold = settings.FREE_SHIPPING_THRESHOLD if free_shipping_threshold is None else free_shipping_threshold
    fee = settings.SHIPPING_FEE if shipping_fee is None else shipping_fee

    totals = compute_totals(items)
    eligible = totals.grand_total >= threshold
    # nothing to ship for an empty cart
    shipping = ZERO if eligible or totals.item_count == 0 else fee
    return CartSummary(
        item_count=totals.item_count,
        subtotal=totals.subtotal,
        discount=totals.total_discount,
        grand_total=totals.grand_total,
        shipping=shipping,
        total=totals.grand_total + shipping,
        free_shipping_threshold=threshold,
        is_eligible_for_free_shipping=eligible,
    )


def round_display(amount: Decimal, decimals: Optional[int] = None) -> Decimal:
    decimals = settings.CURRENCY_DECIMALS if decimals is None else decimals
    return amount.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def _group_indian(digits: str) -> str:
    # last three digits, then groups of two: 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_money(amount: Decimal, decimals: Optional[int] = None, symbol: Optional[str] = None) -> str:
    """
    Round half-up to the display precision and render with Indian digit
    grouping, e.g. Decimal("123456.5") -> "₹1,23,457".
    """
    decimals = settings.CURRENCY_DECIMALS if decimals is None else decimals
    symbol = settings.CURRENCY_SYMBOL if symbol is None else symbol

    rounded = round_display(Decimal(amount), decimals)
    sign = "-" if rounded < 0 else ""
    text = f"{abs(rounded):.{decimals}f}"
    whole, _, frac = text.partition(".")
    out = _group_indian(whole)
    if frac:
        out = f"{out}.{frac}"
    return f"{sign}{symbol}{out}"
