"""
Backend/settlement.py
─────────────────────
settle(schedule, entrants) → SettlementResult

    gross     = (entry fee − admin fee) × Σ buy-ins
    net       = gross − activity bonus
    remaining = net − stake pool
    prize     = chip share of remaining (÷100, floored) + rank 1-3 stake

Both rounding residues go to the chip leader, so Σ prizes == net pool to the
unit. Nothing here raises on odd input; oddities come back as warnings on
the result.
"""

from __future__ import annotations
from typing import Iterable, List, Sequence

import pandas as pd
from loguru import logger

from Backend.chip_share import TieBreak, allocate_chips, rank_entrants
from Backend.fee_schedule import FeeSchedule
from Backend.payout_math import (HUNDRED, ZERO, RoundingPolicy, money_str,
                                 parse_money, percent_str)
from Backend.prize_pool import compute_pools, remaining_pool, total_groups
from Backend.reconcile import finalize
from Backend.records import Entrant, SettlementResult, SettlementWarning, WarningCode
from Backend.stake_split import MAX_STAKE_RANKS, allocate_stakes


def settle(schedule: FeeSchedule, entrants: Iterable[Entrant],
           rounding: RoundingPolicy = RoundingPolicy.FLOOR,
           tie_break: TieBreak = TieBreak.INPUT_ORDER) -> SettlementResult:
    entrants = list(entrants)
    groups = total_groups(entrants)
    pools = compute_pools(schedule.entry_fee, schedule.administrative_fee,
                          groups, schedule.activity_bonus)
    remaining = remaining_pool(pools.net_pool, schedule.total_stake_pool)
    logger.debug(f"{schedule.name or schedule.entry_fee}: {groups} groups, "
                 f"gross {pools.gross_pool}, net {pools.net_pool}, remaining {remaining}")

    ranked = rank_entrants(entrants, tie_break)
    stakes = allocate_stakes(schedule.total_stake_pool, schedule.rank_split,
                             len(ranked), rounding)
    chips = allocate_chips(remaining, ranked, rounding)
    prizes = finalize(chips, stakes, remaining, schedule.total_stake_pool)

    result = SettlementResult(
        schedule=schedule,
        total_groups=groups,
        gross_pool=pools.gross_pool,
        net_pool=pools.net_pool,
        remaining_pool=remaining,
        rank_stakes=stakes.stakes,
        entrant_prizes=prizes,
        stake_shortfall=stakes.shortfall,
        chip_shortfall=chips.shortfall,
        unused_pool=stakes.unused + chips.unused,
    )
    result.warnings = check_settlement_inputs(schedule, entrants, result)
    for w in result.warnings:
        logger.warning(str(w))
    if not result.is_balanced:
        logger.error(f"distributed {result.total_distributed} != net pool {result.net_pool}")
    return result


# ── advisory checks ─────────────────────────────────────────────────────────
def check_settlement_inputs(schedule: FeeSchedule, entrants: Sequence[Entrant],
                            result: SettlementResult) -> List[SettlementWarning]:
    warnings: List[SettlementWarning] = []

    if schedule.split_total != HUNDRED:
        warnings.append(SettlementWarning(
            WarningCode.RANK_SPLIT_TOTAL,
            f"rank split adds up to {schedule.split_total}%, not 100%"))

    if result.gross_pool < 0 or result.remaining_pool < 0:
        warnings.append(SettlementWarning(
            WarningCode.NEGATIVE_POOL,
            f"negative pool (gross {result.gross_pool}, remaining {result.remaining_pool}); "
            f"check admin fee {schedule.administrative_fee} and stake pool {schedule.total_stake_pool}"))

    if not entrants:
        if result.unused_pool:
            warnings.append(SettlementWarning(
                WarningCode.UNDISTRIBUTED_POOL,
                f"no entrants, {result.unused_pool} left undistributed"))
        return warnings

    if len(entrants) < MAX_STAKE_RANKS and schedule.total_stake_pool:
        missing = [p for p in schedule.rank_split[len(entrants):] if p]
        if missing:
            warnings.append(SettlementWarning(
                WarningCode.UNRANKED_SPLIT,
                f"only {len(entrants)} ranked, {sum(missing, ZERO)}% of the stake pool "
                f"has no rank of its own and goes to rank 1"))

    if schedule.start_chips:
        expected = result.total_groups * schedule.start_chips
        actual = sum(e.final_chips for e in entrants)
        if actual != expected:
            warnings.append(SettlementWarning(
                WarningCode.CHIP_COUNT_MISMATCH,
                f"chips on table {actual} != {result.total_groups} groups x "
                f"{schedule.start_chips} = {expected}"))
    return warnings


# ── pandas adapters ─────────────────────────────────────────────────────────
ENTRANT_COLUMNS = ["Member ID", "Buy Ins", "Final Chips"]
SHEET_COLUMNS = ["Member ID", "Rank", "Chips", "Chip %", "Chip Prize", "Stake Bonus", "Total"]


def entrants_from_frame(df: pd.DataFrame) -> List[Entrant]:
    out: List[Entrant] = []
    for _, row in df.iterrows():
        member = row.get("Member ID")
        if pd.isna(member) or not str(member).strip():
            continue
        out.append(Entrant(
            id=str(member).strip(),
            buy_in_count=int(parse_money(row.get("Buy Ins", 0))),
            final_chips=int(parse_money(row.get("Final Chips", 0))),
        ))
    return out


def result_to_frame(result: SettlementResult) -> pd.DataFrame:
    rows = [
        [p.entrant_id, p.rank, p.chips, percent_str(p.chip_share_percent),
         money_str(p.chip_based_amount), money_str(p.stake_bonus), money_str(p.total_amount)]
        for p in result.entrant_prizes
    ]
    return pd.DataFrame(rows, columns=SHEET_COLUMNS)
