"""
Purpose: Core data models for the drivers domain.
What it does:
Defines the onboarding-relevant projection of a Driver document (approval status,
onboarding stage, contracts, police check, employment type, job flags) without
relying on any ORM. Derived fields are properties, never stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class ApprovalStatus(str, Enum):
    """
    Top-level application status set by admin review.
    Lives outside the onboarding state machine.
    """
    PENDING = "pending"
    APPROVED = "approved"
    SUSPENDED = "suspended"
    REJECTED = "rejected"


class OnboardingStatus(str, Enum):
    """
    Strictly ordered compliance stages: not_started < contracts_pending < active.
    """
    NOT_STARTED = "not_started"
    CONTRACTS_PENDING = "contracts_pending"
    ACTIVE = "active"

    @property
    def ordinal(self) -> int:
        return _ONBOARDING_ORDER[self]


_ONBOARDING_ORDER = {
    OnboardingStatus.NOT_STARTED: 0,
    OnboardingStatus.CONTRACTS_PENDING: 1,
    OnboardingStatus.ACTIVE: 2,
}


class EmploymentType(str, Enum):
    EMPLOYEE = "employee"
    CONTRACTOR = "contractor"


# Only employees are supported; every write pins the record to this value.
REQUIRED_EMPLOYMENT_TYPE = EmploymentType.EMPLOYEE


@dataclass(frozen=True)
class Contracts:
    """
    Signature timestamps for the four onboarding documents.
    """
    employment_contract_signed_at: Optional[datetime] = None
    driver_agreement_signed_at: Optional[datetime] = None
    work_health_safety_signed_at: Optional[datetime] = None
    code_of_conduct_signed_at: Optional[datetime] = None

    @property
    def all_signed(self) -> bool:
        return all(
            signed_at is not None
            for signed_at in (
                self.employment_contract_signed_at,
                self.driver_agreement_signed_at,
                self.work_health_safety_signed_at,
                self.code_of_conduct_signed_at,
            )
        )

    @classmethod
    def signed(cls, signed_at: datetime) -> Contracts:
        return cls(signed_at, signed_at, signed_at, signed_at)


@dataclass(frozen=True)
class PoliceCheck:
    completed: bool = False
    document_url: Optional[str] = None
    certificate_number: Optional[str] = None
    issue_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None

    @property
    def is_complete(self) -> bool:
        # A completed flag without an uploaded document does not count.
        return bool(self.completed and self.document_url)


@dataclass(frozen=True)
class DriverRecord:
    """
    A stateless snapshot of a driver's onboarding and job-eligibility fields.

    Every change produces a new instance (dataclasses.replace) which the write
    path must pass through drivers.onboarding.apply_onboarding_invariants
    before persisting.
    """
    id: str
    first_name: str = ""
    last_name: str = ""

    status: ApprovalStatus = ApprovalStatus.PENDING
    onboarding_status: OnboardingStatus = OnboardingStatus.NOT_STARTED
    contracts: Contracts = field(default_factory=Contracts)
    police_check: PoliceCheck = field(default_factory=PoliceCheck)
    employment_type: EmploymentType = EmploymentType.EMPLOYEE

    can_accept_jobs: bool = False
    is_active: bool = True
    is_clocked_in: bool = False

    employee_start_date: Optional[datetime] = None
    last_clock_in: Optional[datetime] = None
    last_clock_out: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def insurance_eligible(self) -> bool:
        """
        Derived at read time from the fields that justify it.
        """
        return (
            self.employment_type == EmploymentType.EMPLOYEE
            and self.onboarding_status == OnboardingStatus.ACTIVE
        )

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> DriverRecord:
        """
        Build a record from a camelCase driver document. Missing nested records
        fall back to empty ones; unknown enum values raise ValueError.
        """
        contracts = doc.get("contracts") or {}
        police_check = doc.get("policeCheck") or {}

        return cls(
            id=str(doc.get("_id", doc.get("id", ""))),
            first_name=doc.get("firstName", ""),
            last_name=doc.get("lastName", ""),
            status=ApprovalStatus(doc.get("status", ApprovalStatus.PENDING.value)),
            onboarding_status=OnboardingStatus(
                doc.get("onboardingStatus", OnboardingStatus.NOT_STARTED.value)
            ),
            contracts=Contracts(
                employment_contract_signed_at=contracts.get("employmentContractSignedAt"),
                driver_agreement_signed_at=contracts.get("driverAgreementSignedAt"),
                work_health_safety_signed_at=contracts.get("workHealthSafetySignedAt"),
                code_of_conduct_signed_at=contracts.get("codeOfConductSignedAt"),
            ),
            police_check=PoliceCheck(
                completed=bool(police_check.get("completed", False)),
                document_url=police_check.get("documentUrl"),
                certificate_number=police_check.get("certificateNumber"),
                issue_date=police_check.get("issueDate"),
                expiry_date=police_check.get("expiryDate"),
            ),
            employment_type=EmploymentType(
                doc.get("employmentType", EmploymentType.EMPLOYEE.value)
            ),
            can_accept_jobs=bool(doc.get("canAcceptJobs", False)),
            is_active=bool(doc.get("isActive", True)),
            is_clocked_in=bool(doc.get("isClockedIn", False)),
            employee_start_date=doc.get("employeeStartDate"),
            last_clock_in=doc.get("lastClockIn"),
            last_clock_out=doc.get("lastClockOut"),
        )

    def to_document(self) -> Dict[str, Any]:
        """
        Stored fields only. insuranceEligible is derived, never written.
        """
        return {
            "_id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "status": self.status.value,
            "onboardingStatus": self.onboarding_status.value,
            "contracts": {
                "employmentContractSignedAt": self.contracts.employment_contract_signed_at,
                "driverAgreementSignedAt": self.contracts.driver_agreement_signed_at,
                "workHealthSafetySignedAt": self.contracts.work_health_safety_signed_at,
                "codeOfConductSignedAt": self.contracts.code_of_conduct_signed_at,
            },
            "policeCheck": {
                "completed": self.police_check.completed,
                "documentUrl": self.police_check.document_url,
                "certificateNumber": self.police_check.certificate_number,
                "issueDate": self.police_check.issue_date,
                "expiryDate": self.police_check.expiry_date,
            },
            "employmentType": self.employment_type.value,
            "canAcceptJobs": self.can_accept_jobs,
            "isActive": self.is_active,
            "isClockedIn": self.is_clocked_in,
            "employeeStartDate": self.employee_start_date,
            "lastClockIn": self.last_clock_in,
            "lastClockOut": self.last_clock_out,
        }
