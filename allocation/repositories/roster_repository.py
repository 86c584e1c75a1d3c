# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Roster snapshot.
Read-only for the session; preserves the order the roster was supplied in.
"""

from typing import Any, Iterable, Optional, Union

from allocation.models.domain import Member


class RosterRepository:
    """In-memory member storage keyed by id, in roster order."""

    def __init__(self, members: Iterable[Union[Member, dict[str, Any]]] = ()) -> None:
        self._store: dict[str, Member] = {}
        self._positions: dict[str, int] = {}
        for member in members:
            self._add(member if isinstance(member, Member) else Member.model_validate(member))

    def _add(self, member: Member) -> None:
        if member.id in self._store:
            raise ValueError(f"Duplicate member id '{member.id}' in roster")
        self._positions[member.id] = len(self._store)
        self._store[member.id] = member

    # ── Read ──

    def get_all(self) -> list[Member]:
        return list(self._store.values())

    def get_by_id(self, member_id: str) -> Optional[Member]:
        return self._store.get(member_id)

    def position(self, member_id: str) -> int:
        return self._positions[member_id]
