# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Allocation session, the capacity and chair-assignment engine.

One session covers one user editing one work item. Members and roles are
read-only snapshots; pending assignments accumulate until commit() turns a
batch into committed records for the caller to persist. Business-rule
failures come back as values. Unknown member / role / chair / pending ids
raise UnknownReferenceError because they mean the caller's snapshot is
inconsistent.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Union

from allocation.core.config import Settings, settings as default_settings
from allocation.core.logging import get_logger
from allocation.metrics.prometheus import (
    ASSIGNMENTS_COMMITTED,
    PENDING_ASSIGNMENTS,
    PROPOSALS_TOTAL,
    REJECTIONS_TOTAL,
    STALE_COMMITS,
)
from allocation.models.domain import Assignment, AssignmentStatus, Chair, Member, Role
from allocation.models.results import (
    AllocationError,
    AllocationErrorCode,
    AllocationResult,
    AllocationWarning,
    ChairOccupancy,
    CommitResult,
    MemberCapacitySummary,
    RankedMember,
    RoleStaffing,
    UnknownReferenceError,
    WarningCode,
    WorkloadCheck,
)
from allocation.repositories.catalog_repository import CatalogRepository
from allocation.repositories.occupancy_repository import OccupancyRepository
from allocation.repositories.pending_repository import PendingRepository
from allocation.repositories.roster_repository import RosterRepository
from allocation.services import capacity
from allocation.services.ranking import MatchScorer, rank_members

logger = get_logger(__name__)

# Marks an update_pending argument the caller did not pass.
_UNSET: Any = object()


class AllocationSession:
    """Business logic for proposing, editing and committing chair assignments."""

    def __init__(
        self,
        roster_repo: RosterRepository,
        catalog_repo: CatalogRepository,
        occupancy_repo: OccupancyRepository,
        pending_repo: PendingRepository,
        config: Optional[Settings] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self._roster = roster_repo
        self._catalog = catalog_repo
        self._occupancy = occupancy_repo
        self._pending = pending_repo
        self._config = config or default_settings
        self._selected_member_id: Optional[str] = None
        self.session_id = session_id or str(uuid.uuid4())

    @property
    def config(self) -> Settings:
        return self._config

    @property
    def members(self) -> list[Member]:
        return self._roster.get_all()

    @property
    def roles(self) -> list[Role]:
        return self._catalog.get_all()

    # ── Selection ──

    @property
    def selected_member_id(self) -> Optional[str]:
        return self._selected_member_id

    def select_member(self, member_id: Optional[str]) -> None:
        """Focus the session on one member; None clears the focus."""
        if member_id is not None:
            self._require_member(member_id)
        self._selected_member_id = member_id

    # ── Capacity queries ──

    def available_capacity(self, member_id: str) -> float:
        """100 - baseline - all committed and pending workload. May be negative."""
        return self._available(self._require_member(member_id))

    def display_capacity(self, member_id: str) -> float:
        return capacity.display_capacity(
            self.available_capacity(member_id), self._config.DECIMAL_PRECISION
        )

    def projected_capacity(self, member_id: str, hypothetical_workload: float) -> float:
        """Available capacity after a workload that has not been proposed yet."""
        return capacity.projected_available(
            self.available_capacity(member_id), hypothetical_workload
        )

    def check_workload(self, member_id: str, workload_percentage: Any = None) -> WorkloadCheck:
        """Preview a workload value for a member without touching session state."""
        return capacity.check_workload(
            self._workload_or_default(workload_percentage),
            self.available_capacity(member_id),
            self._config,
        )

    def member_summary(self, member_id: str) -> MemberCapacitySummary:
        member = self._require_member(member_id)
        available = self._available(member)
        precision = self._config.DECIMAL_PRECISION
        return MemberCapacitySummary(
            member_id=member.id,
            member_name=member.name,
            used_capacity=self._config.FULL_CAPACITY - available,
            available_capacity=available,
            display_capacity=capacity.display_capacity(available, precision),
            status=capacity.capacity_status(available, self._config.FULL_CAPACITY),
            formatted_capacity=capacity.format_available_capacity(available, precision),
            is_over_allocated=available < 0,
        )

    def best_available_members(
        self,
        role_id: Optional[str] = None,
        scorer: Optional[MatchScorer] = None,
        limit: Optional[int] = None,
        include_unavailable: bool = True,
    ) -> list[RankedMember]:
        """
        Members ordered by match score (when a scorer is given), then by
        available capacity. Ties keep roster order.
        """
        role = self._require_role(role_id) if role_id is not None else None
        members = self._roster.get_all()
        available = {m.id: self._available(m) for m in members}
        if not include_unavailable:
            members = [m for m in members if available[m.id] > 0]

        precision = self._config.DECIMAL_PRECISION
        ranked = [
            RankedMember(
                member_id=member.id,
                member_name=member.name,
                roster_position=self._roster.position(member.id),
                available_capacity=avail,
                display_capacity=capacity.display_capacity(avail, precision),
                status=capacity.capacity_status(avail, self._config.FULL_CAPACITY),
                match_score=score,
            )
            for member, avail, score in rank_members(members, available, role, scorer)
        ]
        return ranked[:limit] if limit is not None else ranked

    # ── Chair / role queries ──

    def is_chair_occupied(self, role_id: str, chair_id: str) -> bool:
        self._require_chair(role_id, chair_id)
        return self._slot_holder(role_id, chair_id) is not None

    def chair_occupancy(self, role_id: str) -> list[ChairOccupancy]:
        role = self._require_role(role_id)
        rows = []
        for chair in role.chairs:
            holder = self._slot_holder(role.id, chair.id)
            rows.append(ChairOccupancy(
                role_id=role.id,
                chair_id=chair.id,
                chair_type=chair.type,
                is_required=chair.is_required,
                is_occupied=holder is not None,
                member_id=holder.member_id if holder else None,
                assignment_id=holder.id if holder else None,
                assignment_status=holder.status.value if holder else None,
            ))
        return rows

    def role_staffing(self, role_id: str) -> RoleStaffing:
        role = self._require_role(role_id)
        occupancy = self.chair_occupancy(role_id)
        occupied = sum(1 for c in occupancy if c.is_occupied)
        return RoleStaffing(
            role_id=role.id,
            role_name=role.name,
            required_chair_count=role.required_chair_count,
            configured_chair_count=len(role.chairs),
            occupied_chair_count=occupied,
            open_chair_ids=[c.chair_id for c in occupancy if not c.is_occupied],
            unfilled_required_chair_ids=[
                c.chair_id for c in occupancy if c.is_required and not c.is_occupied
            ],
            is_fully_staffed=occupied >= role.required_chair_count,
            is_overstaffed=occupied > role.required_chair_count,
        )

    def is_role_fully_staffed(self, role_id: str) -> bool:
        return self.role_staffing(role_id).is_fully_staffed

    # ── Assignment views ──

    def pending_assignments(self, member_id: Optional[str] = None) -> list[Assignment]:
        if member_id is None:
            return self._pending.get_all()
        self._require_member(member_id)
        return self._pending.get_by_member(member_id)

    def committed_assignments(self, member_id: Optional[str] = None) -> list[Assignment]:
        if member_id is None:
            return self._occupancy.get_all()
        self._require_member(member_id)
        return self._occupancy.get_by_member(member_id)

    @property
    def has_unsaved_changes(self) -> bool:
        return self._pending.count() > 0

    # ── Commands ──

    def propose_assignment(
        self,
        member_id: str,
        role_id: str,
        chair_id: str,
        workload_percentage: Any = None,
        notes: Optional[str] = None,
    ) -> AllocationResult:
        """
        Validate and append a pending assignment. No mutation on failure.
        A missing workload falls back to DEFAULT_WORKLOAD_PERCENTAGE.
        """
        member = self._require_member(member_id)
        role = self._require_role(role_id)
        chair = self._require_chair(role_id, chair_id)
        workload_percentage = self._workload_or_default(workload_percentage)

        error, warnings, projected = self._validate(member, role, chair, workload_percentage)
        if error is not None:
            return self._reject("propose", error, projected)

        assignment = Assignment(
            id=str(uuid.uuid4()),
            member_id=member.id,
            role_id=role.id,
            chair_id=chair.id,
            workload_percentage=float(workload_percentage),
            notes=notes,
        )
        self._pending.save(assignment)

        PROPOSALS_TOTAL.labels(operation="propose", outcome="accepted").inc()
        PENDING_ASSIGNMENTS.set(self._pending.count())
        logger.info(
            "Assignment proposed: member=%s, role=%s, chair=%s, workload=%g, warnings=%s",
            member.id, role.id, chair.id, assignment.workload_percentage,
            [w.code.value for w in warnings],
            extra={"session_id": self.session_id},
        )
        return AllocationResult(
            assignment=assignment, warnings=warnings, projected_available=projected
        )

    def update_pending(
        self,
        pending_id: str,
        chair_id: Optional[str] = None,
        workload_percentage: Any = None,
        notes: Optional[str] = _UNSET,
    ) -> AllocationResult:
        """
        Patch a pending assignment, revalidating it as if re-proposed.
        chair_id and workload_percentage left as None keep their values;
        notes=None clears the notes.
        Raises UnknownReferenceError if the pending id or new chair is unknown.
        """
        current = self._pending.get_by_id(pending_id)
        if current is None:
            raise UnknownReferenceError("pending assignment", pending_id)

        member = self._require_member(current.member_id)
        role = self._require_role(current.role_id)
        chair = self._require_chair(
            current.role_id, current.chair_id if chair_id is None else chair_id
        )
        workload = (
            current.workload_percentage if workload_percentage is None else workload_percentage
        )

        error, warnings, projected = self._validate(
            member, role, chair, workload, exclude_pending_id=current.id
        )
        if error is not None:
            return self._reject(
                "update", error.model_copy(update={"pending_id": current.id}), projected
            )

        changes: dict[str, Any] = {
            "chair_id": chair.id,
            "workload_percentage": float(workload),
        }
        if notes is not _UNSET:
            changes["notes"] = notes
        updated = current.model_copy(update=changes)
        self._pending.save(updated)

        PROPOSALS_TOTAL.labels(operation="update", outcome="accepted").inc()
        if chair.id != current.chair_id:
            logger.info(
                "Pending assignment moved: id=%s, chair %s -> %s",
                current.id, current.chair_id, chair.id,
                extra={"session_id": self.session_id},
            )
        return AllocationResult(
            assignment=updated, warnings=warnings, projected_available=projected
        )

    def remove_pending(self, pending_id: str) -> None:
        """Drop a pending assignment. Unknown ids are ignored."""
        removed = self._pending.delete(pending_id)
        if removed is None:
            return
        PENDING_ASSIGNMENTS.set(self._pending.count())
        logger.info(
            "Pending assignment removed: id=%s, member=%s, chair=%s",
            removed.id, removed.member_id, removed.chair_id,
            extra={"session_id": self.session_id},
        )

    def commit(self, member_id: Optional[str] = None) -> CommitResult:
        """
        Commit the pending batch for `member_id`, else the selected member,
        else every pending assignment. All-or-nothing: any entry that fails
        revalidation rejects the whole batch with STALE_COMMIT errors.
        """
        batch = self._commit_batch(member_id)
        if not batch:
            return CommitResult()

        failures = self._revalidate(batch)
        if failures:
            STALE_COMMITS.inc()
            REJECTIONS_TOTAL.labels(code=AllocationErrorCode.STALE_COMMIT.value).inc()
            logger.warning(
                "Commit rejected: %d of %d pending assignments are stale (%s)",
                len(failures), len(batch), [f.pending_id for f in failures],
                extra={"session_id": self.session_id},
            )
            return CommitResult(errors=failures)

        now = datetime.now(timezone.utc)
        committed: list[Assignment] = []
        for pending in batch:
            record = pending.model_copy(
                update={"status": AssignmentStatus.COMMITTED, "committed_at": now}
            )
            self._occupancy.save(record)
            self._pending.delete(pending.id)
            committed.append(record)

        ASSIGNMENTS_COMMITTED.inc(len(committed))
        PENDING_ASSIGNMENTS.set(self._pending.count())
        logger.info(
            "Committed %d assignments: members=%s",
            len(committed), sorted({a.member_id for a in committed}),
            extra={"session_id": self.session_id},
        )
        return CommitResult(assignments=committed)

    def sync_committed(
        self, assignments: Iterable[Union[Assignment, dict[str, Any]]]
    ) -> list[AllocationError]:
        """
        Merge committed assignments saved outside this session.
        Records with an out-of-range workload are skipped as INVALID_WORKLOAD;
        records that collide with a different committed holder are skipped
        as CHAIR_ALREADY_OCCUPIED. Every record's references are checked
        before anything is merged, so an UnknownReferenceError leaves
        occupancy untouched.
        """
        now = datetime.now(timezone.utc)
        records: list[Assignment] = []
        for item in assignments:
            record = item if isinstance(item, Assignment) else Assignment.model_validate(item)
            self._require_member(record.member_id)
            self._require_chair(record.role_id, record.chair_id)
            records.append(record.model_copy(update={
                "status": AssignmentStatus.COMMITTED,
                "committed_at": record.committed_at or now,
            }))

        conflicts: list[AllocationError] = []
        merged = 0
        for record in records:
            if not capacity.is_in_workload_range(record.workload_percentage, self._config):
                conflicts.append(AllocationError(
                    code=AllocationErrorCode.INVALID_WORKLOAD,
                    message=f"Workload {record.workload_percentage:g}% is out of range",
                    member_id=record.member_id,
                    role_id=record.role_id,
                    chair_id=record.chair_id,
                    details={"assignment_id": record.id},
                ))
                continue

            holder = self._occupancy.get_by_slot(record.role_id, record.chair_id)
            if holder is not None and holder.id != record.id:
                conflicts.append(AllocationError(
                    code=AllocationErrorCode.CHAIR_ALREADY_OCCUPIED,
                    message=f"Chair '{record.chair_id}' is already committed to member '{holder.member_id}'",
                    member_id=record.member_id,
                    role_id=record.role_id,
                    chair_id=record.chair_id,
                    details={"occupied_by": holder.member_id, "assignment_id": record.id},
                ))
                continue
            self._occupancy.save(record)
            merged += 1

        logger.info(
            "Synced committed assignments: merged=%d, conflicts=%d",
            merged, len(conflicts),
            extra={"session_id": self.session_id},
        )
        return conflicts

    # ── Internal ──

    def _require_member(self, member_id: str) -> Member:
        member = self._roster.get_by_id(member_id)
        if member is None:
            raise UnknownReferenceError("member", member_id)
        return member

    def _require_role(self, role_id: str) -> Role:
        role = self._catalog.get_by_id(role_id)
        if role is None:
            raise UnknownReferenceError("role", role_id)
        return role

    def _require_chair(self, role_id: str, chair_id: str) -> Chair:
        self._require_role(role_id)
        chair = self._catalog.get_chair(role_id, chair_id)
        if chair is None:
            raise UnknownReferenceError("chair", chair_id, scope=f"role '{role_id}'")
        return chair

    def _workload_or_default(self, workload: Any) -> Any:
        return self._config.DEFAULT_WORKLOAD_PERCENTAGE if workload is None else workload

    def _member_assignments(
        self, member_id: str, exclude_pending_id: Optional[str] = None
    ) -> list[Assignment]:
        pending = [
            a for a in self._pending.get_by_member(member_id) if a.id != exclude_pending_id
        ]
        return self._occupancy.get_by_member(member_id) + pending

    def _available(self, member: Member, exclude_pending_id: Optional[str] = None) -> float:
        return capacity.available_capacity(
            member.baseline_workload,
            (a.workload_percentage for a in self._member_assignments(member.id, exclude_pending_id)),
            self._config.FULL_CAPACITY,
        )

    def _slot_holder(
        self, role_id: str, chair_id: str, exclude_pending_id: Optional[str] = None
    ) -> Optional[Assignment]:
        committed = self._occupancy.get_by_slot(role_id, chair_id)
        if committed is not None:
            return committed
        pending = self._pending.get_by_slot(role_id, chair_id)
        if pending is not None and pending.id != exclude_pending_id:
            return pending
        return None

    def _validate(
        self,
        member: Member,
        role: Role,
        chair: Chair,
        workload: Any,
        exclude_pending_id: Optional[str] = None,
    ) -> tuple[Optional[AllocationError], list[AllocationWarning], float]:
        """Shared precondition check for propose and update."""
        context = {"member_id": member.id, "role_id": role.id, "chair_id": chair.id}
        check = capacity.check_workload(
            workload, self._available(member, exclude_pending_id), self._config
        )
        projected = check.projected_available

        if check.error is not None and check.error.code == AllocationErrorCode.INVALID_WORKLOAD:
            return check.error.model_copy(update=context), [], projected

        own = [
            a for a in self._member_assignments(member.id, exclude_pending_id)
            if a.role_id == role.id
        ]
        if any(a.chair_id == chair.id for a in own):
            return AllocationError(
                code=AllocationErrorCode.CHAIR_ALREADY_OCCUPIED,
                message=f"{member.name or member.id} already holds chair '{chair.id}'",
                details={"occupied_by": member.id},
                **context,
            ), [], projected

        holder = self._slot_holder(role.id, chair.id, exclude_pending_id)
        if holder is not None:
            return AllocationError(
                code=AllocationErrorCode.CHAIR_ALREADY_OCCUPIED,
                message=f"Chair '{chair.id}' is already occupied",
                details={"occupied_by": holder.member_id, "status": holder.status.value},
                **context,
            ), [], projected

        if check.error is not None:
            return check.error.model_copy(update=context), [], projected

        warnings = list(check.warnings)
        if own:
            warnings.append(AllocationWarning(
                code=WarningCode.DUPLICATE_MEMBER_IN_ROLE,
                message=(
                    f"{member.name or member.id} is already assigned to "
                    f"{role.name or role.id}"
                ),
                details={"chair_ids": [a.chair_id for a in own]},
            ))
        return None, warnings, projected

    def _reject(
        self, operation: str, error: AllocationError, projected: float
    ) -> AllocationResult:
        PROPOSALS_TOTAL.labels(operation=operation, outcome="rejected").inc()
        REJECTIONS_TOTAL.labels(code=error.code.value).inc()
        logger.warning(
            "Assignment %s rejected: code=%s, member=%s, chair=%s",
            operation, error.code.value, error.member_id, error.chair_id,
            extra={"session_id": self.session_id},
        )
        return AllocationResult(error=error, projected_available=projected)

    def _commit_batch(self, member_id: Optional[str]) -> list[Assignment]:
        scope = member_id or self._selected_member_id
        if scope is None:
            return self._pending.get_all()
        self._require_member(scope)
        return self._pending.get_by_member(scope)

    def _revalidate(self, batch: list[Assignment]) -> list[AllocationError]:
        failures: list[AllocationError] = []
        cfg = self._config
        for pending in batch:
            reason: Optional[str] = None
            details: dict[str, Any] = {}

            holder = self._occupancy.get_by_slot(pending.role_id, pending.chair_id)
            if holder is not None:
                reason = f"Chair '{pending.chair_id}' was committed to member '{holder.member_id}'"
                details["occupied_by"] = holder.member_id
            elif not capacity.is_in_workload_range(pending.workload_percentage, cfg):
                reason = f"Workload {pending.workload_percentage:g}% is out of range"
            elif not cfg.ALLOW_OVER_ALLOCATION:
                available = self._available(self._require_member(pending.member_id))
                if available < 0:
                    reason = "Member would be over-allocated"
                    details["available_capacity"] = available

            if reason is not None:
                failures.append(AllocationError(
                    code=AllocationErrorCode.STALE_COMMIT,
                    message=reason,
                    member_id=pending.member_id,
                    role_id=pending.role_id,
                    chair_id=pending.chair_id,
                    pending_id=pending.id,
                    details=details,
                ))
        return failures
