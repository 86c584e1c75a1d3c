"""Capacity and chair-allocation engine for team assignment sessions."""

from allocation.core.config import Settings, settings
from allocation.core.dependencies import create_session
from allocation.models.domain import Assignment, AssignmentStatus, Chair, Member, Role
from allocation.models.results import (
    AllocationError,
    AllocationErrorCode,
    AllocationResult,
    AllocationWarning,
    CapacityStatus,
    ChairOccupancy,
    CommitResult,
    MemberCapacitySummary,
    RankedMember,
    RoleStaffing,
    UnknownReferenceError,
    WarningCode,
    WorkloadCheck,
)
from allocation.services.allocation_service import AllocationSession

__all__ = [
    "AllocationError",
    "AllocationErrorCode",
    "AllocationResult",
    "AllocationSession",
    "AllocationWarning",
    "Assignment",
    "AssignmentStatus",
    "CapacityStatus",
    "Chair",
    "ChairOccupancy",
    "CommitResult",
    "Member",
    "MemberCapacitySummary",
    "RankedMember",
    "Role",
    "RoleStaffing",
    "Settings",
    "UnknownReferenceError",
    "WarningCode",
    "WorkloadCheck",
    "create_session",
    "settings",
]
