# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Committed chair occupancy.
Maps (role_id, chair_id) to the committed assignment holding it.
"""

from typing import Optional

from allocation.models.domain import Assignment


class OccupancyRepository:
    """In-memory committed-assignment storage keyed by chair slot."""

    def __init__(self) -> None:
        self._store: dict[tuple[str, str], Assignment] = {}

    # ── Read ──

    def get_all(self) -> list[Assignment]:
        return list(self._store.values())

    def get_by_slot(self, role_id: str, chair_id: str) -> Optional[Assignment]:
        return self._store.get((role_id, chair_id))

    def get_by_member(self, member_id: str) -> list[Assignment]:
        return [a for a in self._store.values() if a.member_id == member_id]

    # ── Write ──

    def save(self, assignment: Assignment) -> None:
        self._store[assignment.slot] = assignment
