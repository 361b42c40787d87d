from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable

from ..common.coerce import safe_number
from ..core.enums import ProjectStatus
from .model import Project


@dataclass(frozen=True)
class ProjectMetrics:
    total_projects: int
    active_projects: int
    completed_projects: int
    over_budget_projects: int
    total_budget: float
    total_actual_cost: float
    budget_variance: float

    def to_dict(self) -> dict:
        return asdict(self)


def compute_metrics(projects: Iterable[Project]) -> ProjectMetrics:
    """Portfolio summary cards: counts, totals and budget variance (%)."""
    items = list(projects)
    statuses = [ProjectStatus.parse(p.status) for p in items]

    total_budget = sum(safe_number(p.budget) for p in items)
    total_actual = sum(safe_number(p.actual_cost) for p in items)
    over_budget = sum(
        1
        for p in items
        if safe_number(p.budget) > 0 and safe_number(p.actual_cost) > safe_number(p.budget)
    )
    variance = ((total_actual - total_budget) / total_budget) * 100 if total_budget > 0 else 0.0

    return ProjectMetrics(
        total_projects=len(items),
        active_projects=sum(1 for s in statuses if s in (ProjectStatus.ACTIVE, ProjectStatus.IN_PROGRESS)),
        completed_projects=sum(1 for s in statuses if s == ProjectStatus.COMPLETED),
        over_budget_projects=over_budget,
        total_budget=round(total_budget, 2),
        total_actual_cost=round(total_actual, 2),
        budget_variance=round(variance, 2),
    )
