"""
Backend/records.py
──────────────────
Plain records passed between the settlement stages.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional, TYPE_CHECKING

from Backend.payout_math import ZERO

if TYPE_CHECKING:
    from Backend.fee_schedule import FeeSchedule


@dataclass(frozen=True)
class Entrant:
    id: str
    buy_in_count: int = 1
    final_chips: int = 0


@dataclass(frozen=True)
class RankStake:
    rank: int
    percentage: Decimal
    amount: Decimal


@dataclass(frozen=True)
class ChipShare:
    entrant: Entrant
    rank: int
    percent: Decimal
    amount: Decimal       # after rounding and, for the first entrant, the fold
    adjustment: Decimal = ZERO


@dataclass(frozen=True)
class EntrantPrize:
    entrant_id: str
    rank: int
    chips: int
    chip_share_percent: Decimal
    chip_based_amount: Decimal
    stake_bonus: Decimal
    total_amount: Decimal
    adjustment: Decimal = ZERO   # shortfall received from rounding folds


class WarningCode(str, Enum):
    RANK_SPLIT_TOTAL = "rank_split_total"
    NEGATIVE_POOL = "negative_pool"
    UNRANKED_SPLIT = "unranked_split"
    UNDISTRIBUTED_POOL = "undistributed_pool"
    CHIP_COUNT_MISMATCH = "chip_count_mismatch"


@dataclass(frozen=True)
class SettlementWarning:
    code: WarningCode
    message: str

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


@dataclass
class SettlementResult:
    schedule: "FeeSchedule"
    total_groups: int
    gross_pool: Decimal
    net_pool: Decimal
    remaining_pool: Decimal
    rank_stakes: List[RankStake] = field(default_factory=list)
    entrant_prizes: List[EntrantPrize] = field(default_factory=list)
    stake_shortfall: Decimal = ZERO
    chip_shortfall: Decimal = ZERO
    unused_pool: Decimal = ZERO
    warnings: List[SettlementWarning] = field(default_factory=list)

    @property
    def total_distributed(self) -> Decimal:
        return sum((p.total_amount for p in self.entrant_prizes), ZERO)

    @property
    def is_balanced(self) -> bool:
        if not self.entrant_prizes:
            return True
        return self.total_distributed == self.net_pool

    def prize_for(self, entrant_id: str) -> Optional[EntrantPrize]:
        for p in self.entrant_prizes:
            if p.entrant_id == entrant_id:
                return p
        return None

    def has_warning(self, code: WarningCode) -> bool:
        return any(w.code is code for w in self.warnings)
