# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Session wiring: build repositories from caller snapshots and inject them.
"""

from typing import Any, Iterable, Optional, Union

from allocation.core.config import Settings
from allocation.core.logging import get_logger
from allocation.models.domain import Assignment, Member, Role
from allocation.repositories.catalog_repository import CatalogRepository
from allocation.repositories.occupancy_repository import OccupancyRepository
from allocation.repositories.pending_repository import PendingRepository
from allocation.repositories.roster_repository import RosterRepository
from allocation.services.allocation_service import AllocationSession

logger = get_logger(__name__)


def create_session(
    members: Iterable[Union[Member, dict[str, Any]]],
    roles: Iterable[Union[Role, dict[str, Any]]],
    committed: Iterable[Union[Assignment, dict[str, Any]]] = (),
    config: Optional[Settings] = None,
    session_id: Optional[str] = None,
) -> AllocationSession:
    """
    Start an allocation session from a roster and a role/chair catalog.
    `committed` seeds chair occupancy with assignments saved earlier.
    Raises ValueError on duplicate ids and pydantic.ValidationError on
    malformed input.
    """
    session = AllocationSession(
        roster_repo=RosterRepository(members),
        catalog_repo=CatalogRepository(roles),
        occupancy_repo=OccupancyRepository(),
        pending_repo=PendingRepository(),
        config=config,
        session_id=session_id,
    )
    conflicts = session.sync_committed(committed)
    if conflicts:
        raise ValueError(
            f"Committed snapshot holds {len(conflicts)} conflicting or invalid assignments: "
            f"{[c.code.value for c in conflicts]}"
        )
    logger.info(
        "Session started: id=%s, members=%d, roles=%d",
        session.session_id,
        len(session.members),
        len(session.roles),
    )
    return session
