from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ...common.datetime_utils import today_local
from ...core.constants import HEALTH_MAX_SCORE, HEALTHY_THRESHOLD, WARNING_THRESHOLD
from ...core.enums import HealthStatus
from ..model import HealthScore, Project
from .base import HealthRule
from .budget_rule import BudgetOverrunRule
from .schedule_rule import ScheduleRule
from .stagnation_rule import StagnationRule


def classify(score: int) -> HealthStatus:
    if score >= HEALTHY_THRESHOLD:
        return HealthStatus.HEALTHY
    if score >= WARNING_THRESHOLD:
        return HealthStatus.WARNING
    return HealthStatus.CRITICAL


class HealthScoreCalculator:
    """Start from a perfect score and subtract every rule's penalty.

    Pure and total: no I/O, never raises for missing or malformed fields.
    """

    def __init__(self, rules: Optional[Sequence[HealthRule]] = None):
        self._rules = tuple(rules) if rules is not None else (BudgetOverrunRule(), ScheduleRule(), StagnationRule())

    def breakdown(self, project: Project, *, today: Optional[date] = None) -> dict[str, int]:
        today = today or today_local()
        return {rule.name: max(int(rule.penalty(project, today=today)), 0) for rule in self._rules}

    def calculate(self, project: Project, *, today: Optional[date] = None) -> HealthScore:
        penalties = self.breakdown(project, today=today)
        score = min(max(HEALTH_MAX_SCORE - sum(penalties.values()), 0), HEALTH_MAX_SCORE)
        return HealthScore(score=score, status=classify(score))


_default_calculator = HealthScoreCalculator()


def calculate_health_score(project: Project, *, today: Optional[date] = None) -> HealthScore:
    return _default_calculator.calculate(project, today=today)
