"""
Purpose: Central configuration for the dispatch board.
What it does:

Stores the tunable thresholds used when building the board:

DEFAULT_MAX_JOBS_PER_DAY = 10

BOARD_LIMIT = 50

Values can be overridden from the environment (.env supported):

DISPATCH_DEFAULT_MAX_JOBS_PER_DAY, DISPATCH_BOARD_LIMIT

Rule: Parameters only. Board building reads them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .models import DEFAULT_MAX_JOBS_PER_DAY


@dataclass(frozen=True)
class DispatchPolicy:
    """
    Central configuration for dispatch board construction.
    """

    # --- Capacity ---
    # Used when a driver document has no maxJobsPerDay of its own.
    default_max_jobs_per_day: int = DEFAULT_MAX_JOBS_PER_DAY

    # --- Board size ---
    # Each board column (unassigned pickups, unassigned returns, today's active)
    # shows at most this many bookings.
    board_limit: int = 50

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.default_max_jobs_per_day <= 0:
            raise ValueError("default_max_jobs_per_day must be > 0")

        if self.board_limit <= 0:
            raise ValueError("board_limit must be > 0")


def default_dispatch_policy() -> DispatchPolicy:
    """
    Convenience factory for the default policy.
    """
    p = DispatchPolicy()
    p.validate()
    return p


def policy_from_env() -> DispatchPolicy:
    """
    Default policy with any DISPATCH_* environment overrides applied.
    """
    load_dotenv()
    p = DispatchPolicy(
        default_max_jobs_per_day=int(
            os.getenv("DISPATCH_DEFAULT_MAX_JOBS_PER_DAY", DEFAULT_MAX_JOBS_PER_DAY)
        ),
        board_limit=int(os.getenv("DISPATCH_BOARD_LIMIT", 50)),
    )
    p.validate()
    return p
