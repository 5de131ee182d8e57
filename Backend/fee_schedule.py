"""
Backend/fee_schedule.py
───────────────────────
• Default entry-fee tiers (admin fee per group, one-off stake pool, 50/30/20).
• FeeOverrides: caller-owned admin-fee overrides keyed by entry fee.
• Tiered(entry_fee) | Custom(schedule) is resolved once into a FeeSchedule
  before anything is settled.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from decimal import Decimal
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

import pandas as pd
from loguru import logger

from Backend.payout_math import MoneyLike, ZERO, parse_money

RankSplit = Tuple[Decimal, Decimal, Decimal]
DEFAULT_SPLIT: RankSplit = (Decimal(50), Decimal(30), Decimal(20))


@dataclass(frozen=True)
class FeeSchedule:
    entry_fee: Decimal
    administrative_fee: Decimal
    total_stake_pool: Decimal = ZERO
    rank_split: RankSplit = DEFAULT_SPLIT
    activity_bonus: Optional[Decimal] = None
    name: str = ""
    start_chips: Optional[int] = None

    @property
    def prize_per_group(self) -> Decimal:
        return self.entry_fee - self.administrative_fee

    @property
    def split_total(self) -> Decimal:
        return sum(self.rank_split, ZERO)


def make_schedule(entry_fee: MoneyLike, administrative_fee: MoneyLike,
                  total_stake_pool: MoneyLike = 0,
                  rank_split: Iterable[MoneyLike] = DEFAULT_SPLIT,
                  activity_bonus: MoneyLike = None, name: str = "",
                  start_chips: Optional[int] = None) -> FeeSchedule:
    """Build a FeeSchedule from loose values (ints, strings, "$1,200")."""
    split = [parse_money(p) for p in rank_split][:3]
    split += [ZERO] * (3 - len(split))
    return FeeSchedule(
        entry_fee=parse_money(entry_fee),
        administrative_fee=parse_money(administrative_fee),
        total_stake_pool=parse_money(total_stake_pool),
        rank_split=(split[0], split[1], split[2]),
        activity_bonus=None if activity_bonus is None else parse_money(activity_bonus),
        name=name or f"{parse_money(entry_fee)} custom",
        start_chips=start_chips,
    )


# ── default tiers ───────────────────────────────────────────────────────────
# entry fee: (admin fee per group, stake pool once per tournament, start chips)
_TIER_ROWS: Dict[int, Tuple[int, int, Optional[int]]] = {
    600:   (100,  100,  25000),
    1200:  (100,  100,  25000),
    2300:  (300,  200,  35000),
    3400:  (400,  300,  50000),
    6600:  (600,  500,  100000),
    11000: (1000, 1000, 150000),
    22000: (2000, 2000, None),
}

DEFAULT_TIERS: Dict[Decimal, FeeSchedule] = {
    Decimal(fee): FeeSchedule(
        entry_fee=Decimal(fee),
        administrative_fee=Decimal(admin),
        total_stake_pool=Decimal(stake),
        rank_split=DEFAULT_SPLIT,
        name=f"{fee} timed tournament",
        start_chips=chips,
    )
    for fee, (admin, stake, chips) in _TIER_ROWS.items()
}


# ── admin-fee overrides ─────────────────────────────────────────────────────
class FeeOverrides:
    """Administrative-fee overrides, keyed by entry fee.

    An override wins over the tier default on every resolution until it is
    reset. Setting the same value twice is a no-op.
    """

    def __init__(self, fees: Optional[Mapping[MoneyLike, MoneyLike]] = None):
        self._fees: Dict[Decimal, Decimal] = {}
        if fees:
            self.update(fees)

    def set(self, entry_fee: MoneyLike, administrative_fee: MoneyLike) -> None:
        key, fee = parse_money(entry_fee), parse_money(administrative_fee)
        if self._fees.get(key) != fee:
            logger.debug(f"admin fee override {key} -> {fee}")
        self._fees[key] = fee

    def update(self, fees: Mapping[MoneyLike, MoneyLike]) -> None:
        for entry_fee, admin_fee in fees.items():
            self.set(entry_fee, admin_fee)

    def reset(self, entry_fee: MoneyLike = None) -> None:
        """Drop one override, or all of them when no entry fee is given."""
        if entry_fee is None:
            self._fees.clear()
        else:
            self._fees.pop(parse_money(entry_fee), None)

    def get(self, entry_fee: MoneyLike) -> Optional[Decimal]:
        return self._fees.get(parse_money(entry_fee))

    def administrative_fee_for(self, entry_fee: MoneyLike) -> Decimal:
        """Override, else tier default, else 0."""
        key = parse_money(entry_fee)
        if key in self._fees:
            return self._fees[key]
        tier = DEFAULT_TIERS.get(key)
        return tier.administrative_fee if tier else ZERO

    def as_dict(self) -> Dict[Decimal, Decimal]:
        return dict(self._fees)

    def __contains__(self, entry_fee: MoneyLike) -> bool:
        return parse_money(entry_fee) in self._fees

    def __len__(self) -> int:
        return len(self._fees)

    def __repr__(self) -> str:
        return f"FeeOverrides({self._fees!r})"


OVERRIDE_COLUMNS = ["Entry Fee", "Administrative Fee"]


def load_overrides(path: Path) -> FeeOverrides:
    if not path.exists():
        return FeeOverrides()
    df = pd.read_csv(path)
    overrides = FeeOverrides()
    for _, row in df.iterrows():
        overrides.set(row["Entry Fee"], row["Administrative Fee"])
    return overrides


def save_overrides(overrides: FeeOverrides, path: Path) -> None:
    rows = sorted(overrides.as_dict().items())
    df = pd.DataFrame([(str(k), str(v)) for k, v in rows], columns=OVERRIDE_COLUMNS)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)


# ── resolution ──────────────────────────────────────────────────────────────
def resolve(entry_fee: MoneyLike, overrides: Optional[FeeOverrides] = None) -> Optional[FeeSchedule]:
    """Tier lookup with overrides applied; None for an unknown entry fee."""
    tier = DEFAULT_TIERS.get(parse_money(entry_fee))
    if tier is None:
        return None
    if overrides is None:
        return tier
    fee = overrides.administrative_fee_for(tier.entry_fee)
    return tier if fee == tier.administrative_fee else replace(tier, administrative_fee=fee)


@dataclass(frozen=True)
class Tiered:
    entry_fee: Decimal
    activity_bonus: Optional[Decimal] = None


@dataclass(frozen=True)
class Custom:
    schedule: FeeSchedule


FeeScheduleSource = Union[Tiered, Custom]


def resolve_source(source: FeeScheduleSource,
                   overrides: Optional[FeeOverrides] = None) -> Optional[FeeSchedule]:
    if isinstance(source, Custom):
        return source.schedule
    schedule = resolve(source.entry_fee, overrides)
    if schedule is not None and source.activity_bonus is not None:
        schedule = replace(schedule, activity_bonus=parse_money(source.activity_bonus))
    return schedule
