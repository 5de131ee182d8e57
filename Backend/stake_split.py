"""
Backend/stake_split.py
──────────────────────
Splits the once-per-tournament stake pool across ranks 1-3.

• Only as many ranks as there are entrants (max 3).
• Each rank: pool × pct / 100, rounded to a hundred.
• Whatever rounding (or a missing rank) leaves over goes to rank 1, so the
  stakes always add back up to the pool.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Sequence

from loguru import logger

from Backend.payout_math import HUNDRED, ZERO, RoundingPolicy, to_hundred
from Backend.records import RankStake

MAX_STAKE_RANKS = 3


@dataclass
class StakeAllocation:
    stakes: List[RankStake] = field(default_factory=list)
    shortfall: Decimal = ZERO     # folded into rank 1
    unused: Decimal = ZERO        # nobody to give it to

    @property
    def total(self) -> Decimal:
        return sum((s.amount for s in self.stakes), ZERO)

    def bonus_for(self, rank: int) -> Decimal:
        for s in self.stakes:
            if s.rank == rank:
                return s.amount
        return ZERO


def allocate_stakes(total_stake_pool: Decimal, rank_split: Sequence[Decimal],
                    ranked_count: int,
                    rounding: RoundingPolicy = RoundingPolicy.FLOOR) -> StakeAllocation:
    ranks = min(MAX_STAKE_RANKS, ranked_count)
    if ranks <= 0:
        if total_stake_pool:
            logger.debug(f"stake pool {total_stake_pool} unused, nobody ranked")
        return StakeAllocation(unused=total_stake_pool)

    rounded: List[Decimal] = []
    for i in range(ranks):
        pct = rank_split[i] if i < len(rank_split) else ZERO
        raw = total_stake_pool * pct / HUNDRED
        rounded.append(to_hundred(raw, rounding))
        logger.debug(f"rank {i + 1}: {total_stake_pool} x {pct}% = {raw} -> {rounded[-1]}")

    shortfall = total_stake_pool - sum(rounded, ZERO)
    rounded[0] += shortfall
    if shortfall:
        logger.debug(f"stake shortfall {shortfall} folded into rank 1 -> {rounded[0]}")

    stakes = [
        RankStake(rank=i + 1,
                  percentage=rank_split[i] if i < len(rank_split) else ZERO,
                  amount=amt)
        for i, amt in enumerate(rounded)
    ]
    return StakeAllocation(stakes=stakes, shortfall=shortfall)
