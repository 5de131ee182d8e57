"""
Backend/reconcile.py
────────────────────
Joins chip shares and rank stakes into one prize row per entrant.
"""

from __future__ import annotations
from decimal import Decimal
from typing import List

from loguru import logger

from Backend.chip_share import ChipAllocation
from Backend.payout_math import ZERO
from Backend.records import EntrantPrize
from Backend.stake_split import MAX_STAKE_RANKS, StakeAllocation


def finalize(chips: ChipAllocation, stakes: StakeAllocation,
             remaining_pool: Decimal, total_stake_pool: Decimal) -> List[EntrantPrize]:
    prizes: List[EntrantPrize] = []
    for share in chips.shares:
        bonus = stakes.bonus_for(share.rank) if share.rank <= MAX_STAKE_RANKS else ZERO
        # rank 1 is always the highest-chip entrant, so both folds land on the same row
        adjustment = share.adjustment + (stakes.shortfall if share.rank == 1 else ZERO)
        prizes.append(EntrantPrize(
            entrant_id=share.entrant.id,
            rank=share.rank,
            chips=share.entrant.final_chips,
            chip_share_percent=share.percent,
            chip_based_amount=share.amount,
            stake_bonus=bonus,
            total_amount=share.amount + bonus,
            adjustment=adjustment,
        ))

    if prizes:
        chip_paid = sum((p.chip_based_amount for p in prizes), ZERO)
        if chip_paid != remaining_pool:
            logger.error(f"chip shares add up to {chip_paid}, remaining pool is {remaining_pool}")
        stake_paid = sum((s.amount for s in stakes.stakes), ZERO)
        if stake_paid != total_stake_pool:
            logger.error(f"rank stakes add up to {stake_paid}, stake pool is {total_stake_pool}")
    return prizes
