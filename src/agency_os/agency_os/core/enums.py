from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from .exceptions import ValidationError


def _lookup(enum_cls, value: Any) -> Optional[Enum]:
    """Member for an enum instance or a case-insensitive raw value; None if unrecognized."""
    if isinstance(value, enum_cls):
        return value
    raw = value.value if isinstance(value, Enum) else value
    try:
        return enum_cls(str(raw if raw is not None else "").strip().lower())
    except ValueError:
        return None


class Role(str, Enum):
    """Agency roles used for authorization."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    CEO = "ceo"
    OPERATIONS_MANAGER = "operations_manager"
    PROJECT_MANAGER = "project_manager"
    TEAM_LEAD = "team_lead"
    HR = "hr"
    FINANCE_MANAGER = "finance_manager"
    EMPLOYEE = "employee"
    CONTRACTOR = "contractor"
    INTERN = "intern"

    @classmethod
    def parse(cls, value: Any) -> "Role":
        return _lookup(cls, value) or cls.EMPLOYEE


# Roles allowed to run destructive bulk actions (bulk delete).
DESTRUCTIVE_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.CEO, Role.PROJECT_MANAGER})


class ProjectStatus(str, Enum):
    """Project lifecycle status as stored in the database."""

    PLANNING = "planning"
    ACTIVE = "active"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "ProjectStatus":
        """Unrecognized values map to UNKNOWN instead of raising."""
        return _lookup(cls, value) or cls.UNKNOWN

    @property
    def is_closed(self) -> bool:
        return self in (ProjectStatus.COMPLETED, ProjectStatus.CANCELLED)


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "Priority":
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.MEDIUM
        return _lookup(cls, value) or cls.UNKNOWN


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class ViewMode(str, Enum):
    """How the board renders the same filtered collection."""

    GRID = "grid"
    LIST = "list"
    KANBAN = "kanban"
    GANTT = "gantt"
    TIMELINE = "timeline"

    @classmethod
    def parse(cls, value: Any) -> "ViewMode":
        mode = _lookup(cls, value)
        if mode is None:
            raise ValidationError(f"Unknown view mode: {value!r}")
        return mode


class SortKey(str, Enum):
    CREATED_AT = "created_at"
    NAME = "name"
    STATUS = "status"
    PRIORITY = "priority"
    BUDGET = "budget"
    DEADLINE = "deadline"
    PROGRESS = "progress"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


STATUS_ORDINAL = {
    ProjectStatus.PLANNING: 1,
    ProjectStatus.ACTIVE: 2,
    ProjectStatus.IN_PROGRESS: 3,
    ProjectStatus.ON_HOLD: 4,
    ProjectStatus.COMPLETED: 5,
    ProjectStatus.CANCELLED: 6,
}

PRIORITY_ORDINAL = {
    Priority.LOW: 1,
    Priority.MEDIUM: 2,
    Priority.HIGH: 3,
    Priority.CRITICAL: 4,
}

KANBAN_STATUSES = (
    ProjectStatus.PLANNING,
    ProjectStatus.ACTIVE,
    ProjectStatus.IN_PROGRESS,
    ProjectStatus.ON_HOLD,
    ProjectStatus.COMPLETED,
)
