"""
Bundle price arithmetic, shared by the admin API and the cart composer.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from smartbundle.models.bundle import DiscountType

CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_bundle_price(total, discount_type: str, value) -> Decimal:
    """
    Price of a bundle after its discount.

    percentage: total * (1 - value / 100)
    fixed_amount: max(0, total - value)
    """
    total = Decimal(str(total))
    value = Decimal(str(value))

    if discount_type == DiscountType.FIXED_AMOUNT.value:
        price = max(Decimal("0"), total - value)
    else:
        price = total * (Decimal("1") - value / Decimal("100"))

    return to_money(price)


def sum_prices(prices: Iterable) -> Decimal:
    return to_money(sum((Decimal(str(p)) for p in prices), Decimal("0")))
