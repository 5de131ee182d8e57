#!/usr/bin/env python3
"""
Backend/settle_tournament.py
────────────────────────────
Reads an entrants CSV (Member ID, Buy Ins, Final Chips), settles the
tournament and writes a payout sheet.

• Tier tournaments: --entry-fee 6600 (admin-fee overrides from --overrides).
• Custom tournaments: --custom with --admin-fee / --stake-pool / --split.
• Sheet goes to Settlements/<stem>_settlement.csv unless --out is given.

Run:

    python -m Backend.settle_tournament --csv "Entrants/6600_10_18.csv" \
           --entry-fee 6600 --activity-bonus 500
"""

from __future__ import annotations
import argparse, sys
from pathlib import Path
from typing import List, Optional

import pandas as pd
from loguru import logger

from Backend.chip_share import TieBreak
from Backend.fee_schedule import (Custom, FeeOverrides, FeeSchedule, Tiered,
                                  load_overrides, make_schedule, resolve_source)
from Backend.logging_setup import configure_logging
from Backend.payout_math import RoundingPolicy, money_str, parse_money
from Backend.records import SettlementResult
from Backend.settlement import ENTRANT_COLUMNS, entrants_from_frame, result_to_frame, settle


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Tournament prize settlement: chip-weighted payouts plus top-3 stakes"
    )
    ap.add_argument("--csv", required=True, help="Entrants CSV (Member ID, Buy Ins, Final Chips)")
    ap.add_argument("--entry-fee", required=True, help="Buy-in per group, e.g. 6600")
    ap.add_argument("--activity-bonus", default=None, help="Flat amount withheld once, never paid out")
    ap.add_argument("--overrides", default=None, help="Admin-fee overrides CSV (Entry Fee, Administrative Fee)")
    ap.add_argument("--custom", action="store_true", help="Custom tournament, not a fee tier")
    ap.add_argument("--admin-fee", default=None, help="Custom: admin fee per group")
    ap.add_argument("--stake-pool", default="0", help="Custom: stake pool for the top three")
    ap.add_argument("--split", nargs=3, default=["50", "30", "20"], metavar=("P1", "P2", "P3"),
                    help="Custom: stake split percentages")
    ap.add_argument("--start-chips", type=int, default=None, help="Custom: starting stack per group")
    ap.add_argument("--rounding", choices=[p.value for p in RoundingPolicy], default=RoundingPolicy.FLOOR.value)
    ap.add_argument("--tie-break", choices=[t.value for t in TieBreak], default=TieBreak.INPUT_ORDER.value)
    ap.add_argument("--out", default=None, help="Where to write the payout sheet")
    ap.add_argument("--verbose", action="store_true")
    ap.add_argument("--log-file", default=None, help="Also write a DEBUG log to this file")
    return ap


def build_schedule(args: argparse.Namespace, overrides: FeeOverrides) -> Optional[FeeSchedule]:
    if args.custom:
        if args.admin_fee is None:
            sys.exit("--custom needs --admin-fee")
        schedule = make_schedule(args.entry_fee, args.admin_fee, args.stake_pool, args.split,
                                 args.activity_bonus, start_chips=args.start_chips)
        return resolve_source(Custom(schedule))
    bonus = None if args.activity_bonus is None else parse_money(args.activity_bonus)
    return resolve_source(Tiered(parse_money(args.entry_fee), bonus), overrides)


def print_summary(result: SettlementResult) -> None:
    s = result.schedule
    print(f"{s.name}: {result.total_groups} groups, {len(result.entrant_prizes)} entrants", flush=True)
    print(f"  gross pool {money_str(result.gross_pool)}  net pool {money_str(result.net_pool)}"
          f"  chip pool {money_str(result.remaining_pool)}", flush=True)
    for st in result.rank_stakes:
        print(f"  rank {st.rank} stake ({st.percentage}%): {money_str(st.amount)}", flush=True)
    for w in result.warnings:
        print(f"⚠️  {w}", flush=True)


def run(argv: Optional[List[str]] = None) -> Path:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose, Path(args.log_file) if args.log_file else None)

    ledger = Path(args.csv).expanduser()
    if not ledger.exists():
        sys.exit(f"Entrants file not found: {ledger}")

    overrides = load_overrides(Path(args.overrides)) if args.overrides else FeeOverrides()
    schedule = build_schedule(args, overrides)
    if schedule is None:
        sys.exit(f"Unknown entry fee tier {args.entry_fee}; use --custom")

    df = pd.read_csv(ledger, dtype={"Member ID": str})
    missing = [c for c in ENTRANT_COLUMNS if c not in df.columns]
    if missing:
        sys.exit(f"Entrants file is missing columns: {', '.join(missing)}")
    entrants = entrants_from_frame(df)
    logger.info(f"Read {len(entrants)} entrants from {ledger}")

    result = settle(schedule, entrants, RoundingPolicy(args.rounding), TieBreak(args.tie_break))
    print_summary(result)

    out = Path(args.out) if args.out else ledger.resolve().parents[1] / "Settlements" / f"{ledger.stem}_settlement.csv"
    out.parent.mkdir(parents=True, exist_ok=True)
    result_to_frame(result).to_csv(out, index=False)

    mark = "✅" if result.is_balanced else "⚠️"
    print(f"{mark}  Wrote {out}  (paid {money_str(result.total_distributed)} of "
          f"{money_str(result.net_pool)})", flush=True)
    return out


def main() -> None:
    run()


if __name__ == "__main__":
    main()
