from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from ...common.coerce import safe_number
from ..model import Project


def clamped_progress(project: Project) -> float:
    return min(max(safe_number(project.progress), 0.0), 100.0)


class HealthRule(ABC):
    """Strategy Pattern: one independent penalty factor of the health score."""

    name: str = "rule"

    @abstractmethod
    def penalty(self, project: Project, *, today: date) -> int:
        """Points to subtract from the perfect score (never negative)."""

        raise NotImplementedError
