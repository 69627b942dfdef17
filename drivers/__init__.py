"""
Drivers domain package.

Public API:
- Domain models: DriverRecord, Contracts, PoliceCheck, ApprovalStatus,
  OnboardingStatus, EmploymentType
- Onboarding state machine: apply_onboarding_invariants, normalize_onboarding, can_work
  and the explicit transitions
"""
from .models import (
    ApprovalStatus,
    Contracts,
    DriverRecord,
    EmploymentType,
    OnboardingStatus,
    PoliceCheck,
)
from .onboarding import (
    Correction,
    OnboardingStateException,
    advance_legacy_onboarding,
    apply_onboarding_invariants,
    approve_driver,
    begin_contracts,
    can_work,
    clock_in,
    clock_out,
    normalize_onboarding,
    record_police_check,
    sign_contracts,
)

__all__ = [
    "ApprovalStatus",
    "Contracts",
    "DriverRecord",
    "EmploymentType",
    "OnboardingStatus",
    "PoliceCheck",
    "Correction",
    "OnboardingStateException",
    "advance_legacy_onboarding",
    "apply_onboarding_invariants",
    "approve_driver",
    "begin_contracts",
    "can_work",
    "clock_in",
    "clock_out",
    "normalize_onboarding",
    "record_police_check",
    "sign_contracts",
]
