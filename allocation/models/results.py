# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Result values returned by the allocation session.
Business-rule failures are data, never exceptions.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from allocation.models.domain import Assignment


class AllocationErrorCode(str, Enum):
    INVALID_WORKLOAD = "invalid_workload"
    CHAIR_ALREADY_OCCUPIED = "chair_already_occupied"
    DUPLICATE_MEMBER_IN_ROLE = "duplicate_member_in_role"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    STALE_COMMIT = "stale_commit"


class WarningCode(str, Enum):
    DUPLICATE_MEMBER_IN_ROLE = "duplicate_member_in_role"
    NEARING_CAPACITY = "nearing_capacity"
    OVER_CAPACITY = "over_capacity"


class CapacityStatus(str, Enum):
    FULLY_AVAILABLE = "fully_available"
    AVAILABLE = "available"
    LIMITED = "limited"
    LOW = "low"
    AT_CAPACITY = "at_capacity"
    OVER_ASSIGNED = "over_assigned"


class UnknownReferenceError(KeyError):
    """A member, role, chair or pending id is absent from the session snapshot."""

    def __init__(self, kind: str, ref: str, scope: Optional[str] = None) -> None:
        self.kind = kind
        self.ref = ref
        self.scope = scope
        where = f" in {scope}" if scope else ""
        super().__init__(f"Unknown {kind} '{ref}'{where}")

    def __str__(self) -> str:
        return self.args[0]


class AllocationError(BaseModel):
    code: AllocationErrorCode
    message: str
    member_id: Optional[str] = None
    role_id: Optional[str] = None
    chair_id: Optional[str] = None
    pending_id: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)


class AllocationWarning(BaseModel):
    code: WarningCode
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class WorkloadCheck(BaseModel):
    """Preview of a workload value against a member's current capacity."""
    is_valid: bool
    error: Optional[AllocationError] = None
    warnings: list[AllocationWarning] = Field(default_factory=list)
    projected_available: float
    is_over_capacity: bool
    is_nearing_capacity: bool
    requires_confirmation: bool = False


class AllocationResult(BaseModel):
    """Outcome of propose / update: a record or an error, plus advisories."""
    assignment: Optional[Assignment] = None
    error: Optional[AllocationError] = None
    warnings: list[AllocationWarning] = Field(default_factory=list)
    projected_available: Optional[float] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def has_warning(self, code: WarningCode) -> bool:
        return any(w.code == code for w in self.warnings)


class CommitResult(BaseModel):
    """Outcome of a commit: every record of the batch, or the failing entries."""
    assignments: list[Assignment] = Field(default_factory=list)
    errors: list[AllocationError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def failed_pending_ids(self) -> list[str]:
        return [e.pending_id for e in self.errors if e.pending_id]


class MemberCapacitySummary(BaseModel):
    member_id: str
    member_name: str
    used_capacity: float
    available_capacity: float
    display_capacity: float
    status: CapacityStatus
    formatted_capacity: str
    is_over_allocated: bool


class ChairOccupancy(BaseModel):
    role_id: str
    chair_id: str
    chair_type: str
    is_required: bool
    is_occupied: bool
    member_id: Optional[str] = None
    assignment_id: Optional[str] = None
    assignment_status: Optional[str] = None


class RoleStaffing(BaseModel):
    role_id: str
    role_name: str
    required_chair_count: int
    configured_chair_count: int
    occupied_chair_count: int
    open_chair_ids: list[str]
    unfilled_required_chair_ids: list[str]
    is_fully_staffed: bool
    is_overstaffed: bool


class RankedMember(BaseModel):
    member_id: str
    member_name: str
    roster_position: int
    available_capacity: float
    display_capacity: float
    status: CapacityStatus
    match_score: Optional[float] = None
