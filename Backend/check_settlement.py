#!/usr/bin/env python3
"""
check_settlement.py   –   Stand-alone validator

• Load the entrants CSV a settlement was computed from.
• Recompute gross / net pool for the fee tier (or custom fees).
• Load the payout sheet settle_tournament.py produced.
• Make sure every entrant has exactly one row, every row is a whole hundred
  apart from the leader's, and the sheet pays out the net pool to the unit.

Run:

    python -m Backend.check_settlement \
           --entrants "Entrants/6600_10_18.csv" \
           --payout   "Settlements/6600_10_18_settlement.csv" \
           --entry-fee 6600 --activity-bonus 500
"""

from __future__ import annotations
import argparse, sys
from pathlib import Path
from typing import List, Optional, Tuple

import pandas as pd

from Backend.fee_schedule import (FeeOverrides, FeeSchedule, Tiered, load_overrides,
                                  make_schedule, resolve_source)
from Backend.payout_math import HUNDRED, ZERO, money_str, parse_money
from Backend.prize_pool import compute_pools, total_groups
from Backend.settlement import entrants_from_frame

Mismatch = Tuple[str, str]


def check(entrants_df: pd.DataFrame, payout_df: pd.DataFrame, schedule: FeeSchedule) -> List[Mismatch]:
    entrants = entrants_from_frame(entrants_df)
    pools = compute_pools(schedule.entry_fee, schedule.administrative_fee,
                          total_groups(entrants), schedule.activity_bonus)
    bad: List[Mismatch] = []

    expected_ids = {e.id for e in entrants}
    paid_ids = [str(m).strip() for m in payout_df["Member ID"]]
    for mid in sorted(expected_ids - set(paid_ids)):
        bad.append((mid, "missing from payout sheet"))
    for mid in sorted(set(paid_ids) - expected_ids):
        bad.append((mid, "not an entrant"))
    seen = set()
    for mid in paid_ids:
        if mid in seen:
            bad.append((mid, "listed more than once"))
        seen.add(mid)

    total = ZERO
    for i, (_, r) in enumerate(payout_df.iterrows()):
        amt = parse_money(r["Total"])
        total += amt
        if i > 0 and amt % HUNDRED:
            bad.append((str(r["Member ID"]), f"{money_str(amt)} is not a whole hundred"))

    if entrants and total != pools.net_pool:
        bad.append(("TOTAL", f"paid {money_str(total)} but net pool is {money_str(pools.net_pool)}"))
    return bad


def schedule_from_args(args: argparse.Namespace, overrides: FeeOverrides) -> Optional[FeeSchedule]:
    if args.admin_fee is not None:
        return make_schedule(args.entry_fee, args.admin_fee, activity_bonus=args.activity_bonus)
    bonus = None if args.activity_bonus is None else parse_money(args.activity_bonus)
    return resolve_source(Tiered(parse_money(args.entry_fee), bonus), overrides)


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--entrants", required=True, help="Entrants CSV the settlement was made from")
    ap.add_argument("--payout", required=True, help="CSV produced by settle_tournament")
    ap.add_argument("--entry-fee", required=True)
    ap.add_argument("--admin-fee", default=None, help="Custom admin fee (skips tier lookup)")
    ap.add_argument("--activity-bonus", default=None)
    ap.add_argument("--overrides", default=None, help="Admin-fee overrides CSV")
    args = ap.parse_args(argv)

    ent, pay = Path(args.entrants), Path(args.payout)
    if not ent.exists(): sys.exit(f"entrants file not found: {ent}")
    if not pay.exists(): sys.exit(f"payout file not found: {pay}")

    overrides = load_overrides(Path(args.overrides)) if args.overrides else FeeOverrides()
    schedule = schedule_from_args(args, overrides)
    if schedule is None: sys.exit(f"unknown entry fee tier {args.entry_fee}")

    bad = check(pd.read_csv(ent, dtype={"Member ID": str}),
                pd.read_csv(pay, dtype={"Member ID": str}), schedule)
    if bad:
        print("⚠️  mismatches:\n")
        for who, why in bad:
            print(f"{who:<20}  {why}")
        sys.exit(1)
    print("✅  payout sheet covers every entrant and pays out the net pool.")


if __name__ == "__main__":
    main()
