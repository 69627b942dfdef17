#Expose the high-level dispatch pieces:
#Models (job legs, driver candidates)
#Ranking (who is best for a leg)
#Board builder (the "one call" entry point for the dispatch screen)
#Ledger (conditional leg assignment)

from .models import DriverCandidate, JobLeg, Leg
from .ranking import RankedLeg, matches_preferred_area, rank_board, rank_drivers
from .board import DispatchBoard, build_dispatch_board
from .assignment import (
    AssignmentError,
    BookingLedger,
    BookingNotFoundError,
    ConflictError,
    DriverNotEligibleError,
    DriverNotFoundError,
)
from .policy import DispatchPolicy, default_dispatch_policy

__all__ = [
    "DriverCandidate",
    "JobLeg",
    "Leg",
    "RankedLeg",
    "matches_preferred_area",
    "rank_board",
    "rank_drivers",
    "DispatchBoard",
    "build_dispatch_board",
    "AssignmentError",
    "BookingLedger",
    "BookingNotFoundError",
    "ConflictError",
    "DriverNotEligibleError",
    "DriverNotFoundError",
    "DispatchPolicy",
    "default_dispatch_policy",
]
