"""
Backend/prize_pool.py
─────────────────────
(entry fee − admin fee) × groups → gross pool; minus activity bonus → net pool.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Iterable, NamedTuple, Optional

from Backend.payout_math import ZERO
from Backend.records import Entrant


class PoolTotals(NamedTuple):
    gross_pool: Decimal
    net_pool: Decimal


def total_groups(entrants: Iterable[Entrant]) -> int:
    return sum(e.buy_in_count for e in entrants)


def compute_pools(entry_fee: Decimal, administrative_fee: Decimal,
                  groups: int, activity_bonus: Optional[Decimal] = None) -> PoolTotals:
    # negative results are a misconfiguration; left for the caller to flag
    gross = (entry_fee - administrative_fee) * groups
    net = gross - (activity_bonus or ZERO)
    return PoolTotals(gross, net)


def remaining_pool(net_pool: Decimal, total_stake_pool: Decimal) -> Decimal:
    return net_pool - total_stake_pool
