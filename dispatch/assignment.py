"""
Purpose: Assign and unassign drivers on booking legs (the write side of dispatch).
What it does:
Owns an in-memory store of booking and driver documents standing in for the
document database. Every assignment is a conditional write, "set the driver
only if the leg is still unassigned", performed under a lock so two admins
racing for the same leg get one success and one ConflictError instead of a
double booking.

The assigned driver is read through the onboarding guard first: the corrected
record is written back and eligibility is judged on it, never on a raw flag.
"""

from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from drivers.models import DriverRecord
from drivers.onboarding import apply_onboarding_invariants

from .board import is_board_eligible
from .models import Leg

logger = logging.getLogger(__name__)

Document = Dict[str, Any]

_LEG_FIELDS = {
    Leg.PICKUP: ("assignedDriverId", "pickupDriver"),
    Leg.RETURN: ("returnDriverId", "returnDriver"),
}


class AssignmentError(Exception):
    """Raised when an assignment request is invalid for the booking's current state."""
    pass


class BookingNotFoundError(AssignmentError):
    pass


class DriverNotFoundError(AssignmentError):
    pass


class DriverNotEligibleError(AssignmentError):
    pass


class ConflictError(AssignmentError):
    """Raised when the leg was assigned by someone else first."""
    pass


@dataclass
class BookingLedger:
    """
    In-memory booking/driver store with atomic leg assignment.
    """
    _bookings: Dict[str, Document] = field(default_factory=dict)
    _drivers: Dict[str, Document] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def from_documents(cls, bookings: Iterable[Document], drivers: Iterable[Document]) -> BookingLedger:
        ledger = cls()
        for booking in bookings:
            ledger._bookings[str(booking["_id"])] = copy.deepcopy(booking)
        for driver in drivers:
            ledger._drivers[str(driver["_id"])] = copy.deepcopy(driver)
        return ledger

    # --- Reads ---

    def get_booking(self, booking_id: str) -> Optional[Document]:
        booking = self._bookings.get(booking_id)
        return copy.deepcopy(booking) if booking else None

    def get_driver(self, driver_id: str) -> Optional[Document]:
        driver = self._drivers.get(driver_id)
        return copy.deepcopy(driver) if driver else None

    def bookings(self) -> List[Document]:
        return [copy.deepcopy(b) for b in self._bookings.values()]

    def drivers(self) -> List[Document]:
        return [copy.deepcopy(d) for d in self._drivers.values()]

    # --- Writes ---

    def assign(self, booking_id: str, driver_id: str, leg: str | Leg, now: Optional[datetime] = None) -> Document:
        """
        Assign driver_id to one leg of booking_id. Returns the updated booking.
        """
        leg = Leg(leg)
        now = now or datetime.now()

        driver_id_field, progress_field = _LEG_FIELDS[leg]

        with self._lock:
            driver = self._drivers.get(driver_id)
            if driver is None:
                raise DriverNotFoundError(f"Driver {driver_id} not found")

            record = self._guard_driver(driver)
            if not is_board_eligible(record):
                raise DriverNotEligibleError(f"Driver {driver_id} is not eligible for jobs")

            booking = self._bookings.get(booking_id)
            if booking is None:
                raise BookingNotFoundError(f"Booking {booking_id} not found")

            if leg == Leg.RETURN and not booking.get("assignedDriverId"):
                raise AssignmentError(
                    f"Cannot assign return for booking {booking_id}: no pickup driver assigned yet"
                )

            # Conditional write: only if the leg is still unassigned.
            if booking.get(driver_id_field):
                raise ConflictError(
                    f"{leg.value.capitalize()} driver already assigned for booking {booking_id}"
                )

            booking[driver_id_field] = driver_id
            booking[progress_field] = {"driverId": driver_id, "assignedAt": now}
            if leg == Leg.PICKUP:
                booking["driverAssignedAt"] = now
                booking["driverAcceptedAt"] = now
            booking["updatedAt"] = now
            booking.setdefault("updates", []).append(
                {
                    "stage": f"{leg.value}_driver_dispatched",
                    "timestamp": now,
                    "message": f"{leg.value.capitalize()} driver {_driver_name(driver)} assigned by admin.",
                    "updatedBy": "admin",
                }
            )

            metrics = driver.setdefault("metrics", {})
            metrics["totalJobs"] = metrics.get("totalJobs", 0) + 1

            logger.info("Assigned driver %s to %s leg of booking %s", driver_id, leg.value, booking_id)
            return copy.deepcopy(booking)

    def _guard_driver(self, driver: Document) -> DriverRecord:
        """
        Run the onboarding guard over a stored driver document and commit any
        correction back to it. Caller holds the lock.
        """
        record = apply_onboarding_invariants(DriverRecord.from_document(driver))

        driver["onboardingStatus"] = record.onboarding_status.value
        driver["canAcceptJobs"] = record.can_accept_jobs
        driver["employmentType"] = record.employment_type.value
        return record

    def unassign(self, booking_id: str, leg: str | Leg, now: Optional[datetime] = None) -> Document:
        """
        Clear a leg's driver. Refused once that leg has started. Clearing the
        pickup also clears a return assignment that has not started.
        """
        leg = Leg(leg)
        now = now or datetime.now()

        with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None:
                raise BookingNotFoundError(f"Booking {booking_id} not found")

            driver_id_field, progress_field = _LEG_FIELDS[leg]
            progress = booking.get(progress_field) or {}
            if progress.get("startedAt"):
                raise AssignmentError(
                    f"Cannot unassign {leg.value} for booking {booking_id}: already in progress"
                )

            updates = booking.setdefault("updates", [])

            if leg == Leg.PICKUP:
                return_progress = booking.get("returnDriver") or {}
                if booking.get("returnDriverId") and not return_progress.get("startedAt"):
                    booking.pop("returnDriverId", None)
                    booking.pop("returnDriver", None)
                    updates.append(
                        {
                            "stage": "return_driver_auto_cleared",
                            "timestamp": now,
                            "message": "Return assignment cleared because pickup driver was unassigned.",
                            "updatedBy": "admin",
                        }
                    )
                booking.pop("driverAssignedAt", None)
                booking.pop("driverAcceptedAt", None)

            booking.pop(driver_id_field, None)
            booking.pop(progress_field, None)
            booking["updatedAt"] = now
            updates.append(
                {
                    "stage": f"{leg.value}_driver_unassigned",
                    "timestamp": now,
                    "message": f"{leg.value.capitalize()} driver unassigned by admin.",
                    "updatedBy": "admin",
                }
            )

            logger.info("Unassigned %s leg of booking %s", leg.value, booking_id)
            return copy.deepcopy(booking)


def _driver_name(driver: Document) -> str:
    return f"{driver.get('firstName', '')} {driver.get('lastName', '')}".strip()
