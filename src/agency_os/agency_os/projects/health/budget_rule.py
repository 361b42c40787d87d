from __future__ import annotations

import math
from datetime import date

from ...common.coerce import safe_number
from ...core.constants import BUDGET_OVERRUN_MAX_PENALTY, BUDGET_OVERRUN_WEIGHT
from ..model import Project
from .base import HealthRule


class BudgetOverrunRule(HealthRule):
    """Penalty proportional to (actual - budget) / budget, capped."""

    name = "budget"

    def __init__(self, *, weight: int = BUDGET_OVERRUN_WEIGHT, max_penalty: int = BUDGET_OVERRUN_MAX_PENALTY):
        self._weight = weight
        self._max_penalty = max_penalty

    def penalty(self, project: Project, *, today: date) -> int:
        budget = safe_number(project.budget)
        actual = safe_number(project.actual_cost)
        if budget <= 0 or actual <= budget:
            return 0

        overrun_ratio = (actual - budget) / budget
        return min(self._max_penalty, math.ceil(overrun_ratio * self._weight))
