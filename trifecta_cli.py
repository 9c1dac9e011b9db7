#!/usr/bin/env python3
"""
Interactive Boxed Trifecta Planner
Asks for the field, the win you want and each horse's odds, then prints the
hedged stake for every finishing order plus optional odds-range filters.
"""
from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from typing import Callable, Optional

import dotenv

from trifecta_planner import (
    MAX_HORSE_ODDS, MIN_HORSES, Plan, filter_plan, generate_plan, plan_to_text,
)

logger = logging.getLogger(__name__)

DISCLAIMER = (
    "DISCLAIMER: All odds and bet amounts are estimates only. Actual payouts "
    "depend on the final pari-mutuel pool, which is only known after betting closes."
)

_DEFAULT_WIN = 100
_DEFAULT_LOG_LEVEL = "WARNING"


# ---------------------------------------------------------------------------
# Input parsing
# ---------------------------------------------------------------------------

def parse_int(text: Optional[str]) -> Optional[int]:
    """Whole number from user text, or None for anything else."""
    if text is None:
        return None
    try:
        return int(text.strip())
    except ValueError:
        return None


def parse_decimal(text: Optional[str]) -> Optional[float]:
    """Finite decimal from user text ('2.5', '3'), or None for garbage."""
    if text is None:
        return None
    try:
        value = float(text.strip())
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SessionConfig:
    """Settings read from the environment (.env supported)."""
    default_win: int = _DEFAULT_WIN
    log_level: str = _DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "SessionConfig":
        default_win = parse_int(os.getenv("TRIFECTA_DEFAULT_WIN"))
        if default_win is None or default_win <= 0:
            default_win = _DEFAULT_WIN
        log_level = (os.getenv("TRIFECTA_LOG_LEVEL") or _DEFAULT_LOG_LEVEL).upper()
        if not isinstance(getattr(logging, log_level, None), int):
            log_level = _DEFAULT_LOG_LEVEL
        return cls(default_win=default_win, log_level=log_level)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class TrifectaSession:
    """One interactive planning session over stdin/stdout."""

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ):
        self.config = config or SessionConfig()
        self.input_fn = input_fn
        self.output_fn = output_fn
        self.plan: Optional[Plan] = None

    # -- prompts ------------------------------------------------------------

    def _read_int(self, prompt: str) -> int:
        value = parse_int(self.input_fn(prompt))
        while value is None:
            value = parse_int(self.input_fn("Invalid input. Enter an integer: "))
        return value

    def _read_decimal(self, prompt: str) -> float:
        value = parse_decimal(self.input_fn(prompt))
        while value is None:
            value = parse_decimal(self.input_fn("Invalid input. Enter a decimal number: "))
        return value

    def ask_horse_count(self) -> int:
        while True:
            count = self._read_int(f"How many horses in the race? (minimum {MIN_HORSES}): ")
            if count >= MIN_HORSES:
                return count
            self.output_fn(f"Invalid: Must be at least {MIN_HORSES}.")

    def ask_desired_win(self) -> int:
        win = self._read_int("How much would you like to win in $? ")
        if win <= 0:
            default = self.config.default_win
            self.output_fn(f"Invalid: Win amount must be positive. Defaulting to ${default}.")
            return default
        return win

    def ask_horse_odds(self, count: int) -> list:
        self.output_fn("Enter horse odds in $ value (payout per $1, e.g., 2.0):")
        odds = []
        for number in range(1, count + 1):
            while True:
                value = self._read_decimal(f"Horse #{number}: ")
                if value <= 1.0:
                    self.output_fn("Invalid: Odds must be >1.0. Retrying...")
                elif value > MAX_HORSE_ODDS:
                    self.output_fn(f"Invalid: Odds must be at most {MAX_HORSE_ODDS:g}. Retrying...")
                else:
                    break
            odds.append(value)
        return odds

    # -- display ------------------------------------------------------------

    def show_plan(self, plan: Plan, title: str) -> None:
        self.output_fn(plan_to_text(plan, title))

    def filter_loop(self, plan: Plan) -> None:
        while True:
            answer = self.input_fn("Filter bets by odds range? (y/n): ").strip().lower()
            if answer[:1] != "y":
                return
            min_odds = self._read_int("Minimum odds: ")
            max_odds = self._read_int("Maximum odds: ")
            filtered = filter_plan(plan, min_odds, max_odds)
            if filtered is None:
                self.output_fn("Invalid: Minimum must be less than maximum. Skipping filter.")
                continue
            self.show_plan(filtered, f"Filtered Bets ({min_odds} < odds < {max_odds})")
            self.output_fn(f"Total cost for filtered bets: ${filtered.total_stake}")

    def run(self) -> int:
        """Run the whole prompt sequence. Returns a process exit code."""
        self.output_fn(DISCLAIMER)
        try:
            count = self.ask_horse_count()
            desired_win = self.ask_desired_win()
            odds = self.ask_horse_odds(count)

            self.plan = generate_plan(odds, desired_win)
            self.show_plan(self.plan, "All Trifecta Box Bets")
            self.output_fn(
                f"Total cost to cover all valid combinations: ${self.plan.total_stake}"
            )
            self.filter_loop(self.plan)
        except EOFError:
            logger.info("Input closed, ending session")
            self.output_fn("")
        return 0


def main() -> int:
    dotenv.load_dotenv()
    config = SessionConfig.from_env()
    logging.basicConfig(level=getattr(logging, config.log_level))
    return TrifectaSession(config).run()


if __name__ == "__main__":
    raise SystemExit(main())
