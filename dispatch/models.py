"""
Purpose: Domain models for driver dispatch.
What it does:
- Leg: which half of a booking's transport is being dispatched (pickup / return)
- JobLeg: one unassigned leg, derived per request from a booking document
- DriverCandidate: projection of a driver document used for ranking

Rule: No ranking logic here. Models only.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

DEFAULT_MAX_JOBS_PER_DAY = 10


class Leg(str, Enum):
    PICKUP = "pickup"
    RETURN = "return"


@dataclass(frozen=True)
class JobLeg:
    """
    A pickup or return leg awaiting a driver. Not persisted on its own.
    """
    booking_id: str
    leg: Leg
    pickup_address: Optional[str] = None
    scheduled_time: Optional[datetime] = None
    is_manual: bool = False

    @classmethod
    def from_booking(cls, booking: Dict[str, Any], leg: str | Leg) -> JobLeg:
        if isinstance(leg, str):
            leg = Leg(leg)

        # A return leg is scheduled for the dropoff time.
        if leg == Leg.PICKUP:
            scheduled_time = booking.get("pickupTime")
        else:
            scheduled_time = booking.get("dropoffTime")

        return cls(
            booking_id=str(booking.get("_id", "")),
            leg=leg,
            pickup_address=booking.get("pickupAddress"),
            scheduled_time=scheduled_time,
            is_manual=bool(booking.get("isManualTransmission", False)),
        )


@dataclass(frozen=True)
class DriverCandidate:
    """
    A driver as seen by the dispatch ranker at a specific point in time.
    """
    id: str
    name: str = ""
    preferred_areas: Tuple[str, ...] = ()
    max_jobs_per_day: int = DEFAULT_MAX_JOBS_PER_DAY
    todays_job_count: int = 0
    completed_jobs: int = 0
    is_clocked_in: bool = False

    phone: Optional[str] = None
    shift_preference: str = "full_day"

    @property
    def at_capacity(self) -> bool:
        return self.todays_job_count >= self.max_jobs_per_day

    @property
    def selectable(self) -> bool:
        """
        Presentation flag for the dispatch UI. The ranker never filters on it.
        """
        return self.is_clocked_in and not self.at_capacity

    @classmethod
    def new(
        cls,
        driver_id: str,
        name: str = "",
        preferred_areas: Optional[Tuple[str, ...] | list] = None,
        max_jobs_per_day: Optional[int] = None,
        todays_job_count: int = 0,
        completed_jobs: int = 0,
        is_clocked_in: bool = False,
    ) -> DriverCandidate:
        return cls(
            id=driver_id,
            name=name,
            preferred_areas=tuple(preferred_areas or ()),
            max_jobs_per_day=max_jobs_per_day or DEFAULT_MAX_JOBS_PER_DAY,
            todays_job_count=todays_job_count,
            completed_jobs=completed_jobs,
            is_clocked_in=is_clocked_in,
        )

    @classmethod
    def from_document(
        cls,
        doc: Dict[str, Any],
        todays_job_count: int = 0,
        default_max_jobs_per_day: int = DEFAULT_MAX_JOBS_PER_DAY,
    ) -> DriverCandidate:
        """
        Project a driver document. Missing optional fields take the documented
        defaults instead of raising.
        """
        metrics = doc.get("metrics") or {}
        name = f"{doc.get('firstName', '')} {doc.get('lastName', '')}".strip()

        preferred_areas = doc.get("preferredAreas") or ()
        if isinstance(preferred_areas, str):
            # A single area stored as a plain string.
            preferred_areas = (preferred_areas,)

        return cls(
            id=str(doc.get("_id", doc.get("id", ""))),
            name=name,
            preferred_areas=tuple(preferred_areas),
            max_jobs_per_day=doc.get("maxJobsPerDay") or default_max_jobs_per_day,
            todays_job_count=todays_job_count,
            completed_jobs=metrics.get("completedJobs") or 0,
            is_clocked_in=bool(doc.get("isClockedIn", False)),
            phone=doc.get("phone"),
            shift_preference=doc.get("shiftPreference") or "full_day",
        )
