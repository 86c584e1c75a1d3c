# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Pending working set.
Ordered by proposal time; replacing a record keeps its position.
"""

from typing import Optional

from allocation.models.domain import Assignment


class PendingRepository:
    """In-memory pending-assignment storage keyed by assignment id."""

    def __init__(self) -> None:
        self._store: dict[str, Assignment] = {}

    # ── Read ──

    def get_all(self) -> list[Assignment]:
        return list(self._store.values())

    def get_by_id(self, pending_id: str) -> Optional[Assignment]:
        return self._store.get(pending_id)

    def get_by_member(self, member_id: str) -> list[Assignment]:
        return [a for a in self._store.values() if a.member_id == member_id]

    def get_by_slot(self, role_id: str, chair_id: str) -> Optional[Assignment]:
        for assignment in self._store.values():
            if assignment.slot == (role_id, chair_id):
                return assignment
        return None

    def count(self) -> int:
        return len(self._store)

    # ── Write ──

    def save(self, assignment: Assignment) -> None:
        self._store[assignment.id] = assignment

    def delete(self, pending_id: str) -> Optional[Assignment]:
        return self._store.pop(pending_id, None)
