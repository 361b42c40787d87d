from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import NewProject, Project


class ProjectRepository(Protocol):
    """Repository interface for projects.

    Every call is scoped to one agency (tenant); ids from another agency behave as missing.
    """

    def list_for_agency(self, agency_id: int) -> Sequence[Project]:
        raise NotImplementedError

    def get_by_id(self, agency_id: int, project_id: str) -> Optional[Project]:
        raise NotImplementedError

    def create(self, agency_id: int, data: NewProject) -> str:
        raise NotImplementedError

    def update(self, agency_id: int, project_id: str, changes: Mapping[str, Any]) -> bool:
        """Apply a column->value patch; returns False when nothing matched."""

        raise NotImplementedError

    def delete(self, agency_id: int, project_id: str) -> bool:
        raise NotImplementedError

    def set_archived(self, agency_id: int, project_id: str, *, archived: bool) -> bool:
        raise NotImplementedError
