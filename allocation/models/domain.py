# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models: pure data structures, no engine state.
Roster and catalog inputs are validated here; assignment records are immutable.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Member(BaseModel):
    """A team member available for chair assignment."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Member identity")
    name: str = Field(default="", max_length=255, description="Display name")
    title: Optional[str] = None
    location: Optional[str] = None
    expertise: tuple[str, ...] = Field(default=(), description="Expertise tags")
    baseline_workload: float = Field(
        default=0,
        ge=0,
        description="Workload already committed outside the current session",
    )


class Chair(BaseModel):
    """A slot within a role that one member can occupy."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    type: str = Field(default="primary", description="Categorical tag, opaque to the engine")
    is_required: bool = False


class Role(BaseModel):
    """A job function on a work item, composed of chairs."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    chairs: tuple[Chair, ...] = ()
    required_chair_count: int = Field(default=1, ge=0)

    @field_validator("chairs")
    @classmethod
    def unique_chair_ids(cls, v: tuple[Chair, ...]) -> tuple[Chair, ...]:
        seen: set[str] = set()
        for chair in v:
            if chair.id in seen:
                raise ValueError(f"duplicate chair id '{chair.id}' in role")
            seen.add(chair.id)
        return v

    def get_chair(self, chair_id: str) -> Optional[Chair]:
        for chair in self.chairs:
            if chair.id == chair_id:
                return chair
        return None


class AssignmentStatus(str, Enum):
    PENDING = "pending"
    COMMITTED = "committed"


class Assignment(BaseModel):
    """Binds one member to one (role, chair) pair with a workload share."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    member_id: str
    role_id: str
    chair_id: str
    workload_percentage: float = Field(..., gt=0)
    notes: Optional[str] = None
    status: AssignmentStatus = AssignmentStatus.PENDING
    created_at: datetime = Field(default_factory=_utcnow)
    committed_at: Optional[datetime] = None

    @property
    def slot(self) -> tuple[str, str]:
        return self.role_id, self.chair_id
