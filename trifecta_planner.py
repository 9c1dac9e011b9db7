"""Trifecta Planner — hedged stakes for a boxed trifecta.

For every 3-horse combination in a race, estimates the straight trifecta
odds from the individual horse odds and sizes the stake on each of the 6
finishing orders so that whichever order hits returns a fixed net win.
Low-odds combinations get bigger stakes, longshots get $1-$2.

Odds are an approximation (product of decimal odds less 15% takeout), not a
pari-mutuel pool model; real payouts are only known after betting closes.

Usage:
    from trifecta_planner import generate_plan, filter_plan
    plan = generate_plan([3.0, 4.0, 5.0], desired_win=100)
    value = filter_plan(plan, 10, 60)
"""
from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass, field
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Straight trifecta odds ≈ product of horse odds * 0.85 (~15% track takeout)
TAKEOUT_FACTOR = 0.85

# Combinations at or below this estimate are skipped entirely
MIN_PROFITABLE_ODDS = 2.0

MIN_HORSES = 3

# Largest accepted horse odds; the cube times takeout stays a finite float
MAX_HORSE_ODDS = 1e100

# Finishing orders of (i, j, k), in output order
_PERMUTATIONS = list(itertools.permutations(range(3)))

_CENT = Decimal("0.01")


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Horse:
    """A runner: 1-based program number and decimal odds (total return per $1)."""
    number: int
    odds: float

    def __post_init__(self):
        if self.number < 1:
            raise ValueError(f"horse number must be >= 1, got {self.number}")
        if not math.isfinite(self.odds) or not 1.0 < self.odds <= MAX_HORSE_ODDS:
            raise ValueError(
                f"horse #{self.number} odds must be > 1.0 and <= {MAX_HORSE_ODDS:g}, "
                f"got {self.odds}"
            )


@dataclass(frozen=True)
class BetLine:
    """One straight trifecta: exact 1st/2nd/3rd order with its stake."""
    first: int
    second: int
    third: int
    odds: float      # estimated combination odds (same for all 6 orders)
    stake: int       # whole dollars

    @property
    def horses(self) -> Tuple[int, int, int]:
        return (self.first, self.second, self.third)

    @property
    def label(self) -> str:
        return f"{self.first}-{self.second}-{self.third}"

    @property
    def fractional_odds(self) -> float:
        """Odds-to-1 form, never negative."""
        return max(0.0, self.odds - 1.0)


@dataclass(frozen=True)
class Plan:
    """Sorted bet lines for one race and one desired win.

    A filtered plan carries the exclusive odds bounds it was cut with.
    """
    lines: Tuple[BetLine, ...] = ()
    desired_win: int = 0
    min_odds: Optional[float] = None
    max_odds: Optional[float] = None
    warnings: Tuple[str, ...] = field(default=(), compare=False)

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[BetLine]:
        return iter(self.lines)

    @property
    def total_stake(self) -> int:
        return sum(line.stake for line in self.lines)

    @property
    def is_filtered(self) -> bool:
        return self.min_odds is not None or self.max_odds is not None

    @property
    def combination_count(self) -> int:
        return len({tuple(sorted(line.horses)) for line in self.lines})


# ---------------------------------------------------------------------------
# Odds & stake math
# ---------------------------------------------------------------------------

def estimate_outcome_odds(odds_a: float, odds_b: float, odds_c: float) -> float:
    """Approximate straight trifecta odds for three horses.

    Order independent: every finishing order of the same three horses gets
    the same estimate.
    """
    return odds_a * odds_b * odds_c * TAKEOUT_FACTOR


def compute_stake(desired_win: int, odds: float) -> int:
    """Whole-dollar stake that nets at least *desired_win* if *odds* hits.

    Rounds up: ``stake * (odds - 1.0) >= desired_win`` and no smaller
    integer satisfies it.
    """
    if desired_win <= 0:
        raise ValueError(f"desired_win must be positive, got {desired_win}")
    if not math.isfinite(odds) or odds <= 1.0:
        raise ValueError(f"odds must be finite and > 1.0 to size a stake, got {odds}")
    net_odds = odds - 1.0
    return int(math.ceil(desired_win / net_odds))


# ---------------------------------------------------------------------------
# Plan generation
# ---------------------------------------------------------------------------

def generate_plan(horse_odds: Sequence[float], desired_win: int) -> Plan:
    """Build the full boxed trifecta plan.

    *horse_odds* are decimal odds for horses 1..N in program order.
    Combinations with estimated odds <= MIN_PROFITABLE_ODDS are skipped
    (all 6 orders). Lines come back sorted by odds descending; ties keep
    enumeration order.
    """
    if desired_win <= 0:
        raise ValueError(f"desired_win must be positive, got {desired_win}")

    horses = [Horse(number=i, odds=o) for i, o in enumerate(horse_odds, start=1)]
    lines: List[BetLine] = []
    considered = 0
    skipped = 0

    for a, b, c in itertools.combinations(horses, 3):
        considered += 1
        odds = estimate_outcome_odds(a.odds, b.odds, c.odds)
        if odds <= MIN_PROFITABLE_ODDS:
            skipped += 1
            logger.debug(f"Skipping {a.number}-{b.number}-{c.number}: odds {odds:.3f}")
            continue

        stake = compute_stake(desired_win, odds)
        numbers = (a.number, b.number, c.number)
        for p in _PERMUTATIONS:
            lines.append(BetLine(
                first=numbers[p[0]],
                second=numbers[p[1]],
                third=numbers[p[2]],
                odds=odds,
                stake=stake,
            ))

    lines.sort(key=lambda line: line.odds, reverse=True)

    warnings = []
    if len(horses) < MIN_HORSES:
        warnings.append(f"Need at least {MIN_HORSES} horses, got {len(horses)}")
    elif not lines:
        warnings.append("No bets generated: every combination at or below "
                        f"{MIN_PROFITABLE_ODDS:.1f} odds")

    plan = Plan(lines=tuple(lines), desired_win=desired_win, warnings=tuple(warnings))
    logger.info(
        f"Generated plan: {len(horses)} horses, {considered} combinations, "
        f"{skipped} skipped, {len(plan)} lines, total ${plan.total_stake}"
    )
    return plan


def filter_plan(plan: Plan, min_odds: float, max_odds: float) -> Optional[Plan]:
    """Lines with ``min_odds < odds < max_odds`` as a new plan.

    Returns None (filter refused) when min_odds >= max_odds. The source
    plan is left untouched.
    """
    if min_odds >= max_odds:
        logger.warning(f"Refusing filter: min {min_odds} is not below max {max_odds}")
        return None

    kept = [line for line in plan.lines if min_odds < line.odds < max_odds]
    kept.sort(key=lambda line: line.odds, reverse=True)
    return Plan(
        lines=tuple(kept),
        desired_win=plan.desired_win,
        min_odds=min_odds,
        max_odds=max_odds,
    )


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _round2(value: float) -> Decimal:
    # default context holds 28 digits; big odds need the whole integer part
    exact = Decimal(value)
    context = Context(prec=len(str(int(exact))) + 3)
    return exact.quantize(_CENT, rounding=ROUND_HALF_UP, context=context)


def format_bet_line(line: BetLine, desired_win: int) -> str:
    """One console line, e.g. ``Horses 1-2-3: 51.00 or 50.00:1 | Bet $2 to win $100``."""
    return (
        f"Horses {line.label}: {_round2(line.odds)} or "
        f"{_round2(line.fractional_odds)}:1 | "
        f"Bet ${line.stake} to win ${desired_win}"
    )


def plan_to_text(plan: Plan, title: str) -> str:
    """Format a plan as human-readable text."""
    if not plan.lines:
        return f"{title}: No valid bets (all odds ≤{MIN_PROFITABLE_ODDS:.1f})."
    lines = ["", f"--- {title} ---"]
    for line in plan.lines:
        lines.append(format_bet_line(line, plan.desired_win))
    return "\n".join(lines)


def plan_to_dict(plan: Plan) -> Dict[str, Any]:
    """Convert a plan to a JSON-serializable dict."""
    return {
        "desired_win": plan.desired_win,
        "min_odds": plan.min_odds,
        "max_odds": plan.max_odds,
        "total_stake": plan.total_stake,
        "combinations": plan.combination_count,
        "warnings": list(plan.warnings),
        "lines": [
            {
                "horses": list(line.horses),
                "odds": round(line.odds, 4),
                "fractional_odds": round(line.fractional_odds, 4),
                "stake": line.stake,
            }
            for line in plan.lines
        ],
    }


def plan_to_csv(plan: Plan) -> str:
    """Export bet lines as CSV."""
    rows = ["first,second,third,odds,fractional_odds,stake,win"]
    for line in plan.lines:
        rows.append(
            f"{line.first},{line.second},{line.third},"
            f"{line.odds:.2f},{line.fractional_odds:.2f},"
            f"{line.stake},{plan.desired_win}"
        )
    return "\n".join(rows)
