from __future__ import annotations

from datetime import date

from ...common.coerce import as_date
from ...core.constants import STAGNATION_ELAPSED_RATIO, STAGNATION_PENALTY, STAGNATION_PROGRESS_FLOOR
from ...core.enums import ProjectStatus
from ..model import Project
from .base import HealthRule, clamped_progress


class StagnationRule(HealthRule):
    """Most of the start..deadline window is gone but progress is still low."""

    name = "stagnation"

    def penalty(self, project: Project, *, today: date) -> int:
        start, deadline = as_date(project.start_date), as_date(project.deadline)
        if start is None or deadline is None or ProjectStatus.parse(project.status).is_closed:
            return 0

        total_days = (deadline - start).days
        if total_days <= 0:
            return 0

        elapsed_ratio = min(max((today - start).days / total_days, 0.0), 1.0)
        if elapsed_ratio >= STAGNATION_ELAPSED_RATIO and clamped_progress(project) < STAGNATION_PROGRESS_FLOOR:
            return STAGNATION_PENALTY
        return 0
