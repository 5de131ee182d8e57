"""
Backend/payout_math.py
──────────────────────
Money helpers shared by every settlement stage.

• All currency is Decimal (never float).
• Payouts are whole hundreds; how a raw share becomes a hundred is the
  single RoundingPolicy decision point.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP, getcontext
from enum import Enum
from typing import Union

import pandas as pd
from loguru import logger

# library code stays quiet until a CLI calls configure_logging
logger.disable("Backend")

getcontext().prec = 28
ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

MoneyLike = Union[Decimal, int, str, float, None]


class RoundingPolicy(str, Enum):
    FLOOR = "floor"        # documented business rule
    NEAREST = "nearest"    # older calculation, half-up to the nearest hundred

    @property
    def decimal_mode(self) -> str:
        return ROUND_FLOOR if self is RoundingPolicy.FLOOR else ROUND_HALF_UP


# ── tiny helpers ────────────────────────────────────────────────────────────
def parse_money(v: MoneyLike) -> Decimal:
    if v is None:
        return ZERO
    if isinstance(v, Decimal):
        return v
    if isinstance(v, int):
        return Decimal(v)
    if pd.isna(v):
        return ZERO
    s = str(v).replace("$", "").replace(",", "").strip()
    return Decimal(s) if s else ZERO


def money_str(x: Decimal) -> str:
    if x == x.to_integral_value():
        return f"{x.quantize(Decimal(1))}"
    return f"{x.quantize(CENT)}"


def percent_str(x: Decimal) -> str:
    return f"{x.quantize(CENT)}"


def to_hundred(amount: Decimal, policy: RoundingPolicy = RoundingPolicy.FLOOR) -> Decimal:
    """Round a raw share onto a whole multiple of 100."""
    units = (amount / HUNDRED).to_integral_value(rounding=policy.decimal_mode)
    return units * HUNDRED


def share_of(total: Decimal, part: Decimal, whole: Decimal) -> Decimal:
    """total × part / whole, 0 when whole is 0."""
    if whole == 0:
        return ZERO
    return total * part / whole
