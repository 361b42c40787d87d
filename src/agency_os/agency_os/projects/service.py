from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any, Mapping, Sequence

from ..common.coerce import parse_tags
from ..common.datetime_utils import parse_optional_date
from ..common.validators import (
    optional_str,
    require_amount,
    require_max_length,
    require_non_empty,
    require_percentage,
)
from ..core.enums import Priority, ProjectStatus
from ..core.exceptions import NotFoundError, ValidationError
from .client_repository import ClientRepository
from .model import NewProject, Project
from .repository import ProjectRepository

logger = logging.getLogger(__name__)

COPY_SUFFIX = " (Copy)"


def _parse_status(value: Any) -> ProjectStatus:
    status = ProjectStatus.parse(value)
    if status == ProjectStatus.UNKNOWN:
        raise ValidationError(f"Unknown status: {value!r}")
    return status


def _parse_priority(value: Any) -> Priority:
    priority = Priority.parse(value)
    if priority == Priority.UNKNOWN:
        raise ValidationError(f"Unknown priority: {value!r}")
    return priority


# field name -> validator for PATCH payloads
_PATCH_FIELDS = {
    "name": lambda v: require_max_length(require_non_empty(v, "Project name"), "Project name", 255),
    "description": optional_str,
    "project_code": optional_str,
    "status": _parse_status,
    "priority": _parse_priority,
    "progress": lambda v: require_percentage(v, "Progress"),
    "budget": lambda v: require_amount(v, "Budget"),
    "actual_cost": lambda v: require_amount(v, "Actual cost"),
    "currency": lambda v: (optional_str(v) or "USD").upper()[:3],
    "start_date": parse_optional_date,
    "deadline": parse_optional_date,
    "tags": parse_tags,
    "client_id": optional_str,
}


class ProjectService:
    """Use cases over the project collection: fetch and every mutation the board issues.

    All calls are scoped to one agency.
    """

    def __init__(self, projects: ProjectRepository, clients: ClientRepository):
        self._projects = projects
        self._clients = clients

    def _attach_clients(self, agency_id: int, projects: Sequence[Project]) -> list[Project]:
        client_ids = {p.client_id for p in projects if p.client_id}
        if not client_ids:
            return list(projects)

        by_id = {c.client_id: c for c in self._clients.get_many(agency_id, client_ids)}
        return [replace(p, client=by_id.get(p.client_id)) if p.client_id else p for p in projects]

    def fetch_projects(self, *, agency_id: int) -> list[Project]:
        projects = self._projects.list_for_agency(agency_id)
        return self._attach_clients(agency_id, projects)

    def get_project(self, *, agency_id: int, project_id: str) -> Project:
        project = self._projects.get_by_id(agency_id, project_id)
        if not project:
            raise NotFoundError("Project not found")
        return self._attach_clients(agency_id, [project])[0]

    @staticmethod
    def _validate_dates(start_date, deadline) -> None:
        if start_date and deadline and deadline < start_date:
            raise ValidationError("Deadline cannot be before the start date")

    def create_project(self, *, agency_id: int, data: Mapping[str, Any]) -> Project:
        name = _PATCH_FIELDS["name"](data.get("name") or "")
        start_date = parse_optional_date(data.get("start_date"))
        deadline = parse_optional_date(data.get("deadline"))
        self._validate_dates(start_date, deadline)

        new = NewProject(
            name=name,
            status=_parse_status(data.get("status") or ProjectStatus.PLANNING),
            priority=_parse_priority(data.get("priority")),
            progress=require_percentage(data.get("progress") or 0, "Progress"),
            budget=require_amount(data.get("budget"), "Budget"),
            actual_cost=require_amount(data.get("actual_cost"), "Actual cost"),
            currency=_PATCH_FIELDS["currency"](data.get("currency")),
            start_date=start_date,
            deadline=deadline,
            tags=parse_tags(data.get("tags")),
            client_id=optional_str(data.get("client_id")),
            description=optional_str(data.get("description")),
            project_code=optional_str(data.get("project_code")),
        )
        project_id = self._projects.create(agency_id, new)
        logger.info("project created agency=%s id=%s", agency_id, project_id)
        return self.get_project(agency_id=agency_id, project_id=project_id)

    def update_project(self, *, agency_id: int, project_id: str, patch: Mapping[str, Any]) -> Project:
        current = self.get_project(agency_id=agency_id, project_id=project_id)

        unknown = sorted(set(patch) - set(_PATCH_FIELDS))
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(unknown)}")

        changes = {key: _PATCH_FIELDS[key](value) for key, value in patch.items()}
        if not changes:
            return current

        self._validate_dates(
            changes.get("start_date", current.start_date),
            changes.get("deadline", current.deadline),
        )
        self._projects.update(agency_id, project_id, changes)
        logger.info("project updated agency=%s id=%s fields=%s", agency_id, project_id, sorted(changes))
        return self.get_project(agency_id=agency_id, project_id=project_id)

    def change_status(self, *, agency_id: int, project_id: str, status: Any) -> Project:
        return self.update_project(agency_id=agency_id, project_id=project_id, patch={"status": status})

    def delete_project(self, *, agency_id: int, project_id: str) -> None:
        if not self._projects.delete(agency_id, project_id):
            raise NotFoundError("Project not found")
        logger.info("project deleted agency=%s id=%s", agency_id, project_id)

    def archive_project(self, *, agency_id: int, project_id: str) -> None:
        if not self._projects.set_archived(agency_id, project_id, archived=True):
            raise NotFoundError("Project not found")
        logger.info("project archived agency=%s id=%s", agency_id, project_id)

    def duplicate_project(self, *, agency_id: int, project_id: str) -> Project:
        """Copy as '<name> (Copy)', back to planning with no progress or spend."""
        source = self.get_project(agency_id=agency_id, project_id=project_id)
        copy = NewProject(
            name=f"{source.name}{COPY_SUFFIX}",
            status=ProjectStatus.PLANNING,
            priority=source.priority if source.priority != Priority.UNKNOWN else Priority.MEDIUM,
            progress=0,
            budget=source.budget,
            actual_cost=Decimal("0"),
            currency=source.currency,
            start_date=source.start_date,
            deadline=source.deadline,
            tags=source.tags,
            client_id=source.client_id,
            description=source.description,
            project_code=None,
        )
        new_id = self._projects.create(agency_id, copy)
        logger.info("project duplicated agency=%s source=%s copy=%s", agency_id, project_id, new_id)
        return self.get_project(agency_id=agency_id, project_id=new_id)
