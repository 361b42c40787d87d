from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import HealthStatus, Priority, ProjectStatus
from .client_model import Client


@dataclass(frozen=True)
class Project:
    """Domain entity: one unit of billable/trackable work.

    Instances are immutable snapshots read from the database; every mutation
    goes through ProjectService and is followed by a full refetch.
    """

    project_id: str
    name: str
    status: ProjectStatus = ProjectStatus.PLANNING
    priority: Priority = Priority.MEDIUM
    progress: int = 0
    budget: Decimal = Decimal("0")
    actual_cost: Decimal = Decimal("0")
    currency: str = "USD"
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    tags: frozenset[str] = field(default_factory=frozenset)
    client_id: Optional[str] = None
    client: Optional[Client] = None
    description: Optional[str] = None
    project_code: Optional[str] = None
    is_archived: bool = False
    created_at: Optional[datetime] = None

    @property
    def client_name(self) -> str:
        return self.client.display_name if self.client else ""


@dataclass(frozen=True)
class HealthScore:
    """Read-model: derived per render, never persisted."""

    score: int
    status: HealthStatus

    def to_dict(self) -> dict:
        return {"score": self.score, "status": self.status.value}


@dataclass(frozen=True)
class NewProject:
    """Validated input for create/duplicate."""

    name: str
    status: ProjectStatus
    priority: Priority
    progress: int
    budget: Decimal
    actual_cost: Decimal
    currency: str
    start_date: Optional[date]
    deadline: Optional[date]
    tags: frozenset[str]
    client_id: Optional[str]
    description: Optional[str]
    project_code: Optional[str]
