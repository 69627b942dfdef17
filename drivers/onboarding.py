"""
Purpose: Driver onboarding state machine (not_started -> contracts_pending -> active).
What it does:
- normalize_onboarding: the invariant guard run before every write of a driver record.
  It never raises; invalid states are corrected and each correction is reported.
- apply_onboarding_invariants: the pre-commit hook built on the guard. Logs every
  correction and forwards it to an optional diagnostic hook.
- can_work: read-only job-acceptance predicate.
- Explicit transitions (approval, contracts, police check, clock in/out). These raise
  OnboardingStateException for illegal requests, like the dispatch state machines.

Rule: Transitions return new records; nothing here persists anything.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, List, Optional, Tuple

from .models import (
    REQUIRED_EMPLOYMENT_TYPE,
    ApprovalStatus,
    Contracts,
    DriverRecord,
    OnboardingStatus,
    PoliceCheck,
)

logger = logging.getLogger(__name__)


class OnboardingStateException(Exception):
    """Raised when an invalid onboarding transition is attempted."""
    pass


@dataclass(frozen=True)
class Correction:
    """
    One silent fix applied by the invariant guard.
    """
    field: str
    old_value: Any
    new_value: Any
    reason: str


CorrectionHook = Callable[[DriverRecord, Correction], None]


def normalize_onboarding(record: DriverRecord) -> Tuple[DriverRecord, List[Correction]]:
    """
    Pure invariant guard. Returns the corrected copy and the corrections made.

    Rules, in order:
      1) can_accept_jobs is only allowed while onboarding is active.
      2) active requires all four contracts signed and a completed police check
         with an uploaded document; otherwise drop back to contracts_pending.
      3) employment_type is pinned to employee.

    Idempotent: a corrected record passes through unchanged.
    """
    corrections: List[Correction] = []
    onboarding_status = record.onboarding_status
    can_accept_jobs = record.can_accept_jobs

    if can_accept_jobs and onboarding_status != OnboardingStatus.ACTIVE:
        corrections.append(
            Correction("can_accept_jobs", True, False, "onboarding not active")
        )
        can_accept_jobs = False

    if onboarding_status == OnboardingStatus.ACTIVE:
        missing = _missing_prerequisites(record.contracts, record.police_check)
        if missing:
            reason = "missing " + ", ".join(missing)
            corrections.append(
                Correction(
                    "onboarding_status",
                    OnboardingStatus.ACTIVE,
                    OnboardingStatus.CONTRACTS_PENDING,
                    reason,
                )
            )
            onboarding_status = OnboardingStatus.CONTRACTS_PENDING
            if can_accept_jobs:
                corrections.append(Correction("can_accept_jobs", True, False, reason))
                can_accept_jobs = False

    employment_type = record.employment_type
    if employment_type != REQUIRED_EMPLOYMENT_TYPE:
        corrections.append(
            Correction(
                "employment_type",
                employment_type,
                REQUIRED_EMPLOYMENT_TYPE,
                "only employees are supported",
            )
        )
        employment_type = REQUIRED_EMPLOYMENT_TYPE

    if not corrections:
        return record, corrections

    corrected = replace(
        record,
        onboarding_status=onboarding_status,
        can_accept_jobs=can_accept_jobs,
        employment_type=employment_type,
    )
    return corrected, corrections


def apply_onboarding_invariants(
    record: DriverRecord,
    on_correction: Optional[CorrectionHook] = None,
) -> DriverRecord:
    """
    Pre-commit hook: call immediately before persisting a driver record.
    Always returns a consistent record.
    """
    corrected, corrections = normalize_onboarding(record)

    for correction in corrections:
        logger.warning(
            "Corrected driver %s: %s %r -> %r (%s)",
            record.id,
            correction.field,
            _plain(correction.old_value),
            _plain(correction.new_value),
            correction.reason,
        )
        if on_correction is not None:
            on_correction(corrected, correction)

    return corrected


def can_work(record: DriverRecord) -> bool:
    """
    True only when every job-acceptance condition holds. Failing any of them
    simply keeps the driver out of available pools.
    """
    return (
        record.status == ApprovalStatus.APPROVED
        and record.onboarding_status == OnboardingStatus.ACTIVE
        and record.can_accept_jobs
        and record.is_active
        and record.is_clocked_in
    )


# -------------------------
# Explicit transitions
# -------------------------

def approve_driver(record: DriverRecord) -> DriverRecord:
    """
    Admin approval of a pending application. Onboarding starts from scratch.
    """
    if record.status != ApprovalStatus.PENDING:
        raise OnboardingStateException(
            f"Driver {record.id} cannot be approved from status {record.status.value}"
        )

    return apply_onboarding_invariants(
        replace(
            record,
            status=ApprovalStatus.APPROVED,
            onboarding_status=OnboardingStatus.NOT_STARTED,
            can_accept_jobs=False,
        )
    )


def begin_contracts(record: DriverRecord) -> DriverRecord:
    """
    not_started -> contracts_pending, after admin review.
    """
    if record.status != ApprovalStatus.APPROVED:
        raise OnboardingStateException(
            f"Driver {record.id} must be approved before onboarding"
        )
    if record.onboarding_status != OnboardingStatus.NOT_STARTED:
        raise OnboardingStateException(
            f"Driver {record.id} onboarding already {record.onboarding_status.value}"
        )

    return apply_onboarding_invariants(
        replace(
            record,
            onboarding_status=OnboardingStatus.CONTRACTS_PENDING,
            can_accept_jobs=False,
        )
    )


def advance_legacy_onboarding(record: DriverRecord) -> DriverRecord:
    """
    Drivers approved before onboarding existed are still not_started.
    Move them to contracts_pending when they open onboarding; otherwise no-op.
    """
    if (
        record.status == ApprovalStatus.APPROVED
        and record.onboarding_status == OnboardingStatus.NOT_STARTED
    ):
        return begin_contracts(record)
    return record


def record_police_check(
    record: DriverRecord,
    document_url: str,
    *,
    certificate_number: Optional[str] = None,
    issue_date: Optional[datetime] = None,
    expiry_date: Optional[datetime] = None,
) -> DriverRecord:
    if not document_url:
        raise OnboardingStateException("Police check document URL is required")

    police_check = PoliceCheck(
        completed=True,
        document_url=document_url,
        certificate_number=certificate_number,
        issue_date=issue_date,
        expiry_date=expiry_date,
    )
    return apply_onboarding_invariants(replace(record, police_check=police_check))


def sign_contracts(record: DriverRecord, signed_at: datetime) -> DriverRecord:
    """
    contracts_pending (or legacy not_started) -> active.

    Stamps all four contracts, enables job acceptance and sets the employee
    start date. The police check must already be uploaded.
    """
    if record.status != ApprovalStatus.APPROVED:
        raise OnboardingStateException(
            f"Driver {record.id} must be approved before signing contracts"
        )
    if not record.police_check.is_complete:
        raise OnboardingStateException(
            f"Driver {record.id} must upload a police check before completing onboarding"
        )
    if record.onboarding_status == OnboardingStatus.ACTIVE:
        raise OnboardingStateException(
            f"Driver {record.id} has already signed contracts"
        )

    return apply_onboarding_invariants(
        replace(
            record,
            contracts=Contracts.signed(signed_at),
            onboarding_status=OnboardingStatus.ACTIVE,
            can_accept_jobs=True,
            employee_start_date=signed_at,
            employment_type=REQUIRED_EMPLOYMENT_TYPE,
        )
    )


def clock_in(record: DriverRecord, now: datetime) -> DriverRecord:
    _require_job_eligible(record, "clock in")
    if record.is_clocked_in:
        raise OnboardingStateException(f"Driver {record.id} is already clocked in")

    return apply_onboarding_invariants(
        replace(record, is_clocked_in=True, last_clock_in=now)
    )


def clock_out(record: DriverRecord, now: datetime) -> DriverRecord:
    if not record.is_clocked_in:
        raise OnboardingStateException(f"Driver {record.id} is not clocked in")

    return apply_onboarding_invariants(
        replace(record, is_clocked_in=False, last_clock_out=now)
    )


def _require_job_eligible(record: DriverRecord, action: str) -> None:
    if record.onboarding_status != OnboardingStatus.ACTIVE:
        raise OnboardingStateException(
            f"Driver {record.id} must complete onboarding to {action}"
        )
    if not record.can_accept_jobs:
        raise OnboardingStateException(
            f"Driver {record.id} is not eligible to accept jobs"
        )


def _missing_prerequisites(contracts: Contracts, police_check: PoliceCheck) -> List[str]:
    missing = []
    if contracts.employment_contract_signed_at is None:
        missing.append("employment contract")
    if contracts.driver_agreement_signed_at is None:
        missing.append("driver agreement")
    if contracts.work_health_safety_signed_at is None:
        missing.append("work health and safety")
    if contracts.code_of_conduct_signed_at is None:
        missing.append("code of conduct")
    if not police_check.completed:
        missing.append("police check")
    elif not police_check.document_url:
        missing.append("police check document")
    return missing


def _plain(value: Any) -> Any:
    return value.value if hasattr(value, "value") else value
