# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Capacity arithmetic, pure computation with no side effects.

Total capacity is FULL_CAPACITY (100%). A member's used capacity is their
baseline workload plus every session assignment; available capacity is what
is left and goes negative when the member is over-allocated. Display values
are floored at zero and rounded, internal values never are.
"""

import math
from numbers import Real
from typing import Any, Iterable, Optional

from allocation.core.config import Settings, settings as default_settings
from allocation.models.results import (
    AllocationError,
    AllocationErrorCode,
    AllocationWarning,
    CapacityStatus,
    WarningCode,
    WorkloadCheck,
)


def used_capacity(baseline_workload: float, workloads: Iterable[float]) -> float:
    return baseline_workload + sum(workloads)


def available_capacity(
    baseline_workload: float,
    workloads: Iterable[float],
    full_capacity: Optional[float] = None,
) -> float:
    """Unfloored available capacity; negative means over-allocated."""
    full = default_settings.FULL_CAPACITY if full_capacity is None else full_capacity
    return full - used_capacity(baseline_workload, workloads)


def projected_available(current_available: float, workload: float) -> float:
    return current_available - workload


def round_capacity(value: float, precision: Optional[int] = None) -> float:
    digits = default_settings.DECIMAL_PRECISION if precision is None else precision
    return round(value, digits)


def display_capacity(available: float, precision: Optional[int] = None) -> float:
    """Floored at zero for display; over-allocation shows as 0."""
    return max(0.0, round_capacity(available, precision))


def capacity_status(available: float, full_capacity: Optional[float] = None) -> CapacityStatus:
    """Band thresholds are fractions of full capacity (1, 0.5, 0.2)."""
    full = default_settings.FULL_CAPACITY if full_capacity is None else full_capacity
    if available >= full:
        return CapacityStatus.FULLY_AVAILABLE
    if available >= full * 0.5:
        return CapacityStatus.AVAILABLE
    if available >= full * 0.2:
        return CapacityStatus.LIMITED
    if available > 0:
        return CapacityStatus.LOW
    if available == 0:
        return CapacityStatus.AT_CAPACITY
    return CapacityStatus.OVER_ASSIGNED


def format_available_capacity(available: float, precision: Optional[int] = None) -> str:
    """'40.0%' when free capacity remains, '10.0% over' when over-allocated."""
    digits = default_settings.DECIMAL_PRECISION if precision is None else precision
    if available < 0:
        return f"{abs(available):.{digits}f}% over"
    return f"{available:.{digits}f}%"


def is_valid_workload_value(value: Any) -> bool:
    return (
        isinstance(value, Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def is_in_workload_range(workload: float, config: Optional[Settings] = None) -> bool:
    cfg = config or default_settings
    return cfg.MIN_WORKLOAD_PERCENTAGE <= workload <= cfg.MAX_WORKLOAD_PERCENTAGE


def check_workload(
    workload: Any,
    current_available: float,
    config: Optional[Settings] = None,
) -> WorkloadCheck:
    """
    Validate a single assignment's workload against the member's capacity.
    Range violations are errors; crossing full capacity is an error only
    when over-allocation is disallowed, otherwise a confirmation warning.
    """
    cfg = config or default_settings

    if not is_valid_workload_value(workload):
        return WorkloadCheck(
            is_valid=False,
            error=AllocationError(
                code=AllocationErrorCode.INVALID_WORKLOAD,
                message="Workload must be a number",
                details={"workload_percentage": repr(workload)},
            ),
            projected_available=current_available,
            is_over_capacity=current_available < 0,
            is_nearing_capacity=False,
        )

    projected = projected_available(current_available, workload)
    projected_used = cfg.FULL_CAPACITY - projected
    is_over = projected < 0
    is_nearing = cfg.HIGH_CAPACITY_WARNING_THRESHOLD <= projected_used <= cfg.FULL_CAPACITY

    def _invalid(code: AllocationErrorCode, message: str) -> WorkloadCheck:
        return WorkloadCheck(
            is_valid=False,
            error=AllocationError(
                code=code,
                message=message,
                details={
                    "workload_percentage": workload,
                    "available_capacity": current_available,
                },
            ),
            projected_available=projected,
            is_over_capacity=is_over,
            is_nearing_capacity=is_nearing,
        )

    if workload <= 0:
        return _invalid(
            AllocationErrorCode.INVALID_WORKLOAD,
            "Assignment workload must be greater than 0%",
        )
    if workload < cfg.MIN_WORKLOAD_PERCENTAGE:
        return _invalid(
            AllocationErrorCode.INVALID_WORKLOAD,
            f"Workload must be at least {cfg.MIN_WORKLOAD_PERCENTAGE:g}%",
        )
    if workload > cfg.MAX_WORKLOAD_PERCENTAGE:
        return _invalid(
            AllocationErrorCode.INVALID_WORKLOAD,
            f"Single assignment cannot exceed {cfg.MAX_WORKLOAD_PERCENTAGE:g}%",
        )

    warnings: list[AllocationWarning] = []
    if is_over:
        if not cfg.ALLOW_OVER_ALLOCATION:
            return _invalid(
                AllocationErrorCode.CAPACITY_EXCEEDED,
                f"Cannot assign {workload:g}%. Team member has only "
                f"{format_available_capacity(current_available, cfg.DECIMAL_PRECISION)} "
                f"available capacity.",
            )
        warnings.append(AllocationWarning(
            code=WarningCode.OVER_CAPACITY,
            message=(
                "This assignment exceeds 100% capacity. "
                "Team member will be marked as over-assigned."
            ),
            details={"projected_available": projected},
        ))
    elif is_nearing:
        warnings.append(AllocationWarning(
            code=WarningCode.NEARING_CAPACITY,
            message=(
                f"This will bring team member to {projected_used:.0f}% "
                f"capacity (high utilization)"
            ),
            details={"projected_used": projected_used},
        ))

    return WorkloadCheck(
        is_valid=True,
        warnings=warnings,
        projected_available=projected,
        is_over_capacity=is_over,
        is_nearing_capacity=is_nearing,
        requires_confirmation=is_over,
    )
