"""
Purpose: Build the admin dispatch board from already-fetched documents.
What it does:
- Derives unassigned pickup legs and unassigned return legs from booking documents
- Counts today's assignments per driver (capacity display)
- Selects the drivers eligible to appear on the board and projects them to candidates
- Ranks the full driver pool for every unassigned leg

Rule: Board building is read-only. Assignment writes live in dispatch/assignment.py.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence

from drivers.models import ApprovalStatus, DriverRecord, OnboardingStatus

from .models import DriverCandidate, JobLeg, Leg
from .policy import DispatchPolicy, default_dispatch_policy
from .ranking import RankedLeg, rank_board

Booking = Dict[str, Any]


@dataclass
class DispatchBoard:
    """
    Everything the dispatch screen needs in one snapshot.
    """
    unassigned_pickups: List[JobLeg]
    unassigned_returns: List[JobLeg]
    available_drivers: List[DriverCandidate]
    todays_dispatched: List[Booking]
    rankings: List[RankedLeg] = field(default_factory=list)
    generated_at: datetime = field(default_factory=datetime.now)

    def ranking_for(self, booking_id: str, leg: Leg) -> Optional[RankedLeg]:
        for ranked in self.rankings:
            if ranked.job.booking_id == booking_id and ranked.job.leg == leg:
                return ranked
        return None


def is_cancelled(booking: Booking) -> bool:
    cancellation = booking.get("cancellation") or {}
    return cancellation.get("cancelledAt") is not None


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def unassigned_pickup_legs(bookings: Iterable[Booking], limit: int = 50) -> List[JobLeg]:
    """
    Pending bookings with no pickup driver, earliest pickup first,
    newest booking first among equal pickup times.
    """
    pending = [
        booking for booking in bookings
        if booking.get("status") == "pending"
        and not booking.get("assignedDriverId")
        and not is_cancelled(booking)
    ]

    pending.sort(key=lambda b: _desc_time_key(b.get("createdAt")))
    pending.sort(key=lambda b: _asc_time_key(b.get("pickupTime")))

    return [JobLeg.from_booking(booking, Leg.PICKUP) for booking in pending[:limit]]


def unassigned_return_legs(bookings: Iterable[Booking], limit: int = 50) -> List[JobLeg]:
    """
    Bookings whose pickup driver is set but return driver is not, most
    recently updated first.
    """
    waiting = [
        booking for booking in bookings
        if booking.get("assignedDriverId")
        and not booking.get("returnDriverId")
        and booking.get("status") != "completed"
        and not is_cancelled(booking)
    ]

    waiting.sort(key=lambda b: _desc_time_key(b.get("updatedAt")))

    return [JobLeg.from_booking(booking, Leg.RETURN) for booking in waiting[:limit]]


def todays_dispatched(bookings: Iterable[Booking], now: datetime, limit: int = 50) -> List[Booking]:
    today = start_of_day(now)
    active = [
        booking for booking in bookings
        if (booking.get("assignedDriverId") or booking.get("returnDriverId"))
        and not is_cancelled(booking)
        and booking.get("status") != "completed"
        and booking.get("updatedAt") is not None
        and booking["updatedAt"] >= today
    ]
    active.sort(key=lambda b: _desc_time_key(b.get("updatedAt")))
    return active[:limit]


def count_todays_jobs(bookings: Iterable[Booking], now: datetime) -> Dict[str, int]:
    """
    Pickup and return assignments per driver on bookings created today.
    """
    today = start_of_day(now)
    tomorrow = today + timedelta(days=1)
    counts: Dict[str, int] = {}

    for booking in bookings:
        if is_cancelled(booking):
            continue
        created_at = booking.get("createdAt")
        if created_at is None or not (today <= created_at < tomorrow):
            continue

        for key in ("assignedDriverId", "returnDriverId"):
            driver_id = booking.get(key)
            if driver_id:
                driver_id = str(driver_id)
                counts[driver_id] = counts.get(driver_id, 0) + 1

    return counts


def is_board_eligible(record: DriverRecord) -> bool:
    """
    Approved, onboarded, allowed to accept jobs and active. Clock status is not
    checked here: off-clock drivers are listed but not selectable.
    """
    return (
        record.status == ApprovalStatus.APPROVED
        and record.onboarding_status == OnboardingStatus.ACTIVE
        and record.can_accept_jobs
        and record.is_active
    )


def available_drivers(
    driver_docs: Iterable[Dict[str, Any]],
    job_counts: Dict[str, int],
    policy: Optional[DispatchPolicy] = None,
) -> List[DriverCandidate]:
    policy = policy or default_dispatch_policy()
    candidates = []

    for doc in driver_docs:
        record = DriverRecord.from_document(doc)
        if not is_board_eligible(record):
            continue
        candidates.append(
            DriverCandidate.from_document(
                doc,
                todays_job_count=job_counts.get(record.id, 0),
                default_max_jobs_per_day=policy.default_max_jobs_per_day,
            )
        )

    return candidates


def leg_driver_state(booking: Booking, leg: Leg) -> Optional[str]:
    """
    Progress label of a leg's driver, derived from its timestamps.
    """
    if leg == Leg.PICKUP:
        progress = booking.get("pickupDriver")
        if not progress:
            return None
        if progress.get("completedAt"):
            return "completed"
        if progress.get("collectedAt"):
            return "collected"
        if progress.get("arrivedAt"):
            return "arrived"
        if progress.get("startedAt"):
            return "started"
        return "assigned"

    progress = booking.get("returnDriver")
    if not progress:
        return None
    if progress.get("completedAt"):
        return "completed"
    if progress.get("arrivedAt"):
        return "delivering"
    if progress.get("collectedAt"):
        return "collected"
    if progress.get("startedAt"):
        return "started"
    return "assigned"


def build_dispatch_board(
    bookings: Sequence[Booking],
    driver_docs: Sequence[Dict[str, Any]],
    now: Optional[datetime] = None,
    policy: Optional[DispatchPolicy] = None,
) -> DispatchBoard:
    """
    Main entry point: one call builds the whole board, rankings included.
    """
    now = now or datetime.now()
    policy = policy or default_dispatch_policy()

    pickups = unassigned_pickup_legs(bookings, limit=policy.board_limit)
    returns = unassigned_return_legs(bookings, limit=policy.board_limit)
    drivers = available_drivers(driver_docs, count_todays_jobs(bookings, now), policy)

    return DispatchBoard(
        unassigned_pickups=pickups,
        unassigned_returns=returns,
        available_drivers=drivers,
        todays_dispatched=todays_dispatched(bookings, now, limit=policy.board_limit),
        rankings=rank_board(pickups + returns, drivers),
        generated_at=now,
    )


def _asc_time_key(value: Optional[datetime]):
    # Missing times sort last.
    return (value is None, value or datetime.min)


def _desc_time_key(value: Optional[datetime]):
    # Newest first, missing last.
    if value is None:
        return (1, 0.0)
    return (0, -value.timestamp())
