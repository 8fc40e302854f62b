"""Money helpers.

Storage and API unit: dollars as Decimal with two places (Numeric(10, 2)).
Stripe unit: integer cents.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENTS_PER_DOLLAR: int = 100
TWO_PLACES = Decimal("0.01")

Amount = Union[Decimal, float, int, str]


def to_money(amount: Amount) -> Decimal:
    """Coerce to a Decimal rounded half-up to cents."""
    if not isinstance(amount, Decimal):
        # str() first so floats like 16.1 don't carry binary noise
        amount = Decimal(str(amount))
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def dollars_to_cents(amount: Amount) -> int:
    """Convert dollars to integer cents. $16.00 = 1600."""
    return int(to_money(amount) * CENTS_PER_DOLLAR)

