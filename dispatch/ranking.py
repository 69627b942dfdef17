"""
Purpose: Ranking model for dispatch (the "who is best" layer).
What it does:
Takes a job leg + every candidate driver and returns the same drivers in order
of suitability. Keys are successive tie-breaks:

1) clocked in before off the clock
2) preferred-area match before no match
3) fewer jobs already assigned today
4) more lifetime completed jobs

Nobody is filtered out. Capacity and off-clock status only disable selection
in the caller's UI. Equal drivers keep their input order (sorted() is stable).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .models import DriverCandidate, JobLeg

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedLeg:
    """
    A job leg together with its ranked driver list.
    """
    job: JobLeg
    drivers: List[DriverCandidate]


def matches_preferred_area(job: JobLeg, candidate: DriverCandidate) -> bool:
    """
    Case-insensitive substring match of any preferred area inside the pickup
    address. Plain containment, not word boundaries: "Newtown" also matches
    "Newtownabbey". A job without an address matches nobody.
    """
    if job.pickup_address is None:
        return False

    address = job.pickup_address.lower()
    return any(area.lower() in address for area in candidate.preferred_areas)


def driver_sort_key(job: JobLeg, candidate: DriverCandidate) -> Tuple[bool, bool, int, int]:
    # False sorts before True, so negate the "first" conditions.
    return (
        not candidate.is_clocked_in,
        not matches_preferred_area(job, candidate),
        candidate.todays_job_count,
        -candidate.completed_jobs,
    )


def rank_drivers(job: JobLeg, candidates: Sequence[DriverCandidate]) -> List[DriverCandidate]:
    """
    Return a reordered copy of candidates, most suitable first.
    """
    if not candidates:
        return []

    ranked = sorted(candidates, key=lambda candidate: driver_sort_key(job, candidate))

    logger.debug(
        "Ranked %d drivers for %s leg of booking %s; top=%s",
        len(ranked),
        job.leg.value,
        job.booking_id,
        ranked[0].id,
    )
    return ranked


def rank_board(legs: Sequence[JobLeg], candidates: Sequence[DriverCandidate]) -> List[RankedLeg]:
    """
    Rank the full driver pool for every leg on a board.
    """
    return [RankedLeg(job=leg, drivers=rank_drivers(leg, candidates)) for leg in legs]
