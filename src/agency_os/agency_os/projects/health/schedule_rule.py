from __future__ import annotations

from datetime import date

from ...common.coerce import as_date
from ...core.constants import (
    DEADLINE_NEAR_PENALTY,
    DEADLINE_WARNING_DAYS,
    OVERDUE_BASE_PENALTY,
    OVERDUE_DAILY_PENALTY,
    OVERDUE_MAX_PENALTY,
)
from ...core.enums import ProjectStatus
from ..model import Project
from .base import HealthRule


class ScheduleRule(HealthRule):
    """Overdue (grows per day late, capped) or deadline-near penalty for open projects."""

    name = "schedule"

    def penalty(self, project: Project, *, today: date) -> int:
        deadline = as_date(project.deadline)
        if deadline is None or ProjectStatus.parse(project.status).is_closed:
            return 0

        days_until = (deadline - today).days
        if days_until < 0:
            days_overdue = -days_until
            return min(OVERDUE_MAX_PENALTY, OVERDUE_BASE_PENALTY + (days_overdue - 1) * OVERDUE_DAILY_PENALTY)
        if days_until < DEADLINE_WARNING_DAYS:
            return DEADLINE_NEAR_PENALTY
        return 0
