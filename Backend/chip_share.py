"""
Backend/chip_share.py
─────────────────────
Ranks entrants by final chips and splits the remaining pool (net pool minus
stake pool) in proportion to those chips.

• Stable descending sort; ties keep input order unless TieBreak.ENTRANT_ID.
• Busted entrants (0 chips) are ranked but get a zero raw share.
• Rounding residue is folded into the highest-chip entrant.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Tuple

from loguru import logger

from Backend.payout_math import HUNDRED, ZERO, RoundingPolicy, share_of, to_hundred
from Backend.records import ChipShare, Entrant

Ranked = List[Tuple[int, Entrant]]


class TieBreak(str, Enum):
    INPUT_ORDER = "input"
    ENTRANT_ID = "id"


def rank_entrants(entrants: Iterable[Entrant], tie_break: TieBreak = TieBreak.INPUT_ORDER) -> Ranked:
    if tie_break is TieBreak.ENTRANT_ID:
        ordered = sorted(entrants, key=lambda e: (-e.final_chips, e.id))
    else:
        ordered = sorted(entrants, key=lambda e: e.final_chips, reverse=True)
    return [(i + 1, e) for i, e in enumerate(ordered)]


@dataclass
class ChipAllocation:
    shares: List[ChipShare] = field(default_factory=list)
    total_chips: int = 0
    shortfall: Decimal = ZERO
    unused: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return sum((s.amount for s in self.shares), ZERO)


def allocate_chips(remaining: Decimal, ranked: Ranked,
                   rounding: RoundingPolicy = RoundingPolicy.FLOOR) -> ChipAllocation:
    if not ranked:
        return ChipAllocation(unused=remaining)

    total_chips = sum(e.final_chips for _, e in ranked)
    if total_chips == 0:
        logger.debug(f"no chips on the table, {remaining} left as shortfall")

    amounts: List[Decimal] = []
    for _, e in ranked:
        raw = share_of(remaining, Decimal(e.final_chips), Decimal(total_chips))
        amounts.append(to_hundred(raw, rounding))

    shortfall = remaining - sum(amounts, ZERO)
    amounts[0] += shortfall
    if shortfall:
        logger.debug(f"chip shortfall {shortfall} folded into {ranked[0][1].id}")

    shares = []
    for idx, ((rank, e), amt) in enumerate(zip(ranked, amounts)):
        shares.append(ChipShare(
            entrant=e,
            rank=rank,
            percent=share_of(HUNDRED, Decimal(e.final_chips), Decimal(total_chips)),
            amount=amt,
            adjustment=shortfall if idx == 0 else ZERO,
        ))
    return ChipAllocation(shares=shares, total_chips=total_chips, shortfall=shortfall)
