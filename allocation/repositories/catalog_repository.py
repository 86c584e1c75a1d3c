# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Role / chair catalog snapshot.
NO business rules here, lookups only.
"""

from typing import Any, Iterable, Optional, Union

from allocation.models.domain import Chair, Role


class CatalogRepository:
    """In-memory role storage keyed by id, in catalog order."""

    def __init__(self, roles: Iterable[Union[Role, dict[str, Any]]] = ()) -> None:
        self._store: dict[str, Role] = {}
        for role in roles:
            role = role if isinstance(role, Role) else Role.model_validate(role)
            if role.id in self._store:
                raise ValueError(f"Duplicate role id '{role.id}' in catalog")
            self._store[role.id] = role

    # ── Read ──

    def get_all(self) -> list[Role]:
        return list(self._store.values())

    def get_by_id(self, role_id: str) -> Optional[Role]:
        return self._store.get(role_id)

    def get_chair(self, role_id: str, chair_id: str) -> Optional[Chair]:
        role = self._store.get(role_id)
        if role is None:
            return None
        return role.get_chair(chair_id)
