"""View-state controller for the project board.

Owns the `ViewState` of one user and the current snapshot of the project
collection. Every operation is a state transition on an immutable `ViewState`;
mutations go through `ProjectService` and are followed by a full refetch, never
patched into the snapshot. Data-access failures become notifications and leave
the snapshot untouched.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Iterable, Optional

from ..common.coerce import parse_flag
from ..common.datetime_utils import parse_optional_date, today_local
from ..common.validators import require_max_length, require_non_empty
from ..core.constants import PAGE_SIZE_OPTIONS
from ..core.enums import KANBAN_STATUSES, ProjectStatus, ViewMode
from ..core.exceptions import AuthorizationError, DomainError, ValidationError
from ..projects.export import projects_to_csv
from ..projects.filters import (
    DateRange,
    ProjectFilters,
    StatusFilter,
    apply_filters,
    extract_all_tags,
    normalize_search,
    parse_priority_filter,
    parse_sort,
)
from ..projects.health.calculator import HealthScoreCalculator
from ..projects.metrics import ProjectMetrics, compute_metrics
from ..projects.model import HealthScore, Project
from ..projects.service import ProjectService
from ..users.service import SessionUser
from .model import DEFAULT_VIEW_ID, BulkResult, SavedView, ViewState
from .notifier import Notifier
from .repository import FavoriteRepository, SavedViewRepository, SelectionRepository

logger = logging.getLogger(__name__)


class ViewStateController:
    def __init__(
        self,
        *,
        user: SessionUser,
        projects: ProjectService,
        saved_views: SavedViewRepository,
        favorites: FavoriteRepository,
        notifier: Notifier,
        selections: Optional[SelectionRepository] = None,
        state: Optional[ViewState] = None,
        health: Optional[HealthScoreCalculator] = None,
        today: Optional[date] = None,
    ):
        self._user = user
        self._projects_service = projects
        self._saved_views = saved_views
        self._favorites_repo = favorites
        self._notifier = notifier
        self._selections = selections
        self._health = health or HealthScoreCalculator()
        self._today = today

        self.state = state or ViewState()
        self.load_error: Optional[str] = None
        self._projects: tuple[Project, ...] = ()
        self._favorites: frozenset[str] = frozenset()
        self._stored_selection: frozenset[str] = self.state.selection

    # ------------------------------------------------------------------
    # collection
    # ------------------------------------------------------------------

    @property
    def projects(self) -> tuple[Project, ...]:
        return self._projects

    @property
    def favorites(self) -> frozenset[str]:
        return self._favorites

    @property
    def today(self) -> date:
        return self._today or today_local()

    def refresh(self) -> bool:
        """(Re)load the collection; on failure keep the previous snapshot and set `load_error`."""
        try:
            projects = self._projects_service.fetch_projects(agency_id=self._user.agency_id)
            favorites = self._favorites_repo.list_ids(self._user.user_id)
        except DomainError as e:
            logger.warning("project fetch failed agency=%s: %s", self._user.agency_id, e)
            self.load_error = "Failed to load projects"
            self._notifier.error(self.load_error)
            return False

        self._projects = tuple(projects)
        self._favorites = frozenset(favorites)
        self.load_error = None

        existing = {p.project_id for p in self._projects}
        self.state = replace(self.state, selection=self.state.selection & existing)
        self._clamp_page()
        return True

    def visible_projects(self) -> list[Project]:
        return apply_filters(self._projects, self.state.filters, favorites=self._favorites)

    def health(self, project: Project) -> HealthScore:
        return self._health.calculate(project, today=self.today)

    def metrics(self) -> ProjectMetrics:
        return compute_metrics(p for p in self._projects if not p.is_archived)

    def available_tags(self) -> list[str]:
        return extract_all_tags(self._projects)

    def kanban_columns(self) -> dict[str, list[Project]]:
        columns: dict[str, list[Project]] = {s.value: [] for s in KANBAN_STATUSES}
        for p in self.visible_projects():
            status = ProjectStatus.parse(p.status)
            if status.value in columns:
                columns[status.value].append(p)
        return columns

    def export_csv(self) -> bytes:
        return projects_to_csv(self.visible_projects())

    # ------------------------------------------------------------------
    # view mode & pagination
    # ------------------------------------------------------------------

    def set_view_mode(self, mode: Any) -> None:
        self.state = replace(self.state, view_mode=ViewMode.parse(mode))

    def total_pages(self) -> int:
        return max(1, math.ceil(len(self.visible_projects()) / self.state.page_size))

    def page_projects(self) -> list[Project]:
        visible = self.visible_projects()
        page = min(self.state.page, max(1, math.ceil(len(visible) / self.state.page_size)))
        start = (page - 1) * self.state.page_size
        return visible[start : start + self.state.page_size]

    def set_page(self, page: Any) -> None:
        try:
            number = int(page)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid page: {page!r}")
        self.state = replace(self.state, page=min(max(number, 1), self.total_pages()))

    def set_page_size(self, size: Any) -> None:
        try:
            number = int(size)
        except (TypeError, ValueError):
            number = 0
        if number not in PAGE_SIZE_OPTIONS:
            raise ValidationError(f"Page size must be one of {', '.join(map(str, PAGE_SIZE_OPTIONS))}")
        self.state = replace(self.state, page_size=number, page=1)

    def _clamp_page(self) -> None:
        pages = self.total_pages()
        if self.state.page > pages:
            self.state = replace(self.state, page=pages)

    # ------------------------------------------------------------------
    # filters
    # ------------------------------------------------------------------

    def _set_filters(self, filters: ProjectFilters) -> None:
        self.state = replace(self.state, filters=filters, page=1)

    def set_search(self, value: Any) -> None:
        self._set_filters(self.state.filters.with_search(value))

    def set_status_filter(self, value: Any) -> None:
        self._set_filters(replace(self.state.filters, status=StatusFilter.parse(value)))

    def set_priority_filter(self, value: Any) -> None:
        self._set_filters(replace(self.state.filters, priority=parse_priority_filter(value)))

    def toggle_tag_filter(self, tag: str) -> None:
        self._set_filters(self.state.filters.toggle_tag(tag))

    def set_date_range(self, date_from: Any = None, date_to: Any = None) -> None:
        date_range = DateRange(parse_optional_date(date_from), parse_optional_date(date_to))
        if date_range.date_from and date_range.date_to and date_range.date_from > date_range.date_to:
            raise ValidationError("Start of the date range must be before its end")
        self._set_filters(replace(self.state.filters, date_range=date_range))

    def set_show_archived(self, value: Any) -> None:
        self._set_filters(replace(self.state.filters, show_archived=parse_flag(value, "show_archived")))

    def set_sort(self, value: str) -> None:
        sort_by, sort_order = parse_sort(value)
        self._set_filters(replace(self.state.filters, sort_by=sort_by, sort_order=sort_order))

    def update_filters(self, changes: dict) -> None:
        """Apply a partial wire-format filter payload in one transition."""
        merged = {**self.state.filters.to_dict(), **changes}
        merged["search"] = normalize_search(merged.get("search"))
        filters = ProjectFilters.from_dict(merged)
        dr = filters.date_range
        if dr.date_from and dr.date_to and dr.date_from > dr.date_to:
            raise ValidationError("Start of the date range must be before its end")
        self._set_filters(filters)

    def clear_all_filters(self) -> None:
        # single transition: no partially-reset filter state is ever observable
        self.state = replace(self.state, filters=ProjectFilters(), page=1, current_view_id=None)

    # ------------------------------------------------------------------
    # selection
    # ------------------------------------------------------------------

    def toggle_selection(self, project_id: str) -> None:
        project_id = str(project_id)
        selection = self.state.selection
        selection = selection - {project_id} if project_id in selection else selection | {project_id}
        self.state = replace(self.state, selection=frozenset(selection))

    def select_all(self) -> None:
        """Select exactly the visible (filtered) projects, across all pages."""
        self.state = replace(self.state, selection=frozenset(p.project_id for p in self.visible_projects()))

    def clear_selection(self) -> None:
        self.state = replace(self.state, selection=frozenset())

    @property
    def has_selection(self) -> bool:
        return bool(self.state.selection)

    def load_selection(self) -> bool:
        if self._selections is None:
            return True
        try:
            ids = self._selections.list_ids(self._user.user_id)
        except DomainError as e:
            logger.warning("selection fetch failed user=%s: %s", self._user.user_id, e)
            self._notifier.error("Failed to load selection")
            return False
        self.state = replace(self.state, selection=frozenset(str(i) for i in ids))
        self._stored_selection = self.state.selection
        return True

    def persist_selection(self) -> bool:
        """Write the selection back when it changed since it was loaded."""
        if self._selections is None or self.state.selection == self._stored_selection:
            return True
        try:
            self._selections.replace(self._user.user_id, sorted(self.state.selection))
        except DomainError as e:
            logger.warning("selection save failed user=%s: %s", self._user.user_id, e)
            self._notifier.error("Failed to save selection")
            return False
        self._stored_selection = self.state.selection
        return True

    # ------------------------------------------------------------------
    # saved views
    # ------------------------------------------------------------------

    def load_saved_views(self) -> bool:
        try:
            views = self._saved_views.list_for_user(self._user.agency_id, self._user.user_id)
        except DomainError as e:
            logger.warning("saved views fetch failed user=%s: %s", self._user.user_id, e)
            self._notifier.error("Failed to load saved views")
            return False
        self.state = replace(self.state, saved_views=tuple(views))
        return True

    def save_current_view(self, name: str) -> Optional[SavedView]:
        try:
            name = require_max_length(require_non_empty(name, "View name"), "View name", 100)
            view = self._saved_views.create(
                self._user.agency_id,
                self._user.user_id,
                name=name,
                filters=self.state.filters,
            )
        except DomainError as e:
            logger.warning("save view failed user=%s: %s", self._user.user_id, e)
            self._notifier.error(str(e) if isinstance(e, ValidationError) else "Failed to save view")
            return None

        self.state = replace(
            self.state,
            saved_views=self.state.saved_views + (view,),
            current_view_id=view.view_id,
        )
        self._notifier.success(f"View '{view.name}' saved")
        return view

    def load_saved_view(self, view_id: str) -> bool:
        """Replace the filters wholesale; 'default' resets them."""
        if view_id in (None, "", DEFAULT_VIEW_ID):
            self.clear_all_filters()
            return True

        view = next((v for v in self.state.saved_views if v.view_id == str(view_id)), None)
        if view is None:
            logger.warning("unknown saved view id=%s user=%s", view_id, self._user.user_id)
            return False

        self.state = replace(self.state, filters=view.filters, current_view_id=view.view_id, page=1)
        return True

    def delete_saved_view(self, view_id: str) -> bool:
        try:
            deleted = self._saved_views.delete(self._user.agency_id, self._user.user_id, str(view_id))
        except DomainError as e:
            logger.warning("delete view failed id=%s: %s", view_id, e)
            self._notifier.error("Failed to delete view")
            return False
        if not deleted:
            self._notifier.error("Saved view not found")
            return False

        self.state = replace(
            self.state,
            saved_views=tuple(v for v in self.state.saved_views if v.view_id != str(view_id)),
            current_view_id=None if self.state.current_view_id == str(view_id) else self.state.current_view_id,
        )
        self._notifier.success("View deleted")
        return True

    # ------------------------------------------------------------------
    # single-project mutations
    # ------------------------------------------------------------------

    def _find(self, project_id: str) -> Optional[Project]:
        return next((p for p in self._projects if p.project_id == str(project_id)), None)

    def _require_destructive_role(self) -> None:
        if not self._user.can_delete_projects:
            raise AuthorizationError("You do not have permission to delete projects")

    def _mutate(self, ids: Iterable[str], action: Callable[[], Any], *, success: str, failure: str) -> Any:
        """Run one mutation with `ids` marked pending; refetch on success, notify on failure."""
        ids = frozenset(str(i) for i in ids)
        self.state = replace(self.state, pending_ids=self.state.pending_ids | ids)
        try:
            result = action()
        except DomainError as e:
            logger.warning("%s ids=%s: %s", failure, sorted(ids), e)
            self._notifier.error(str(e) if isinstance(e, ValidationError) else failure)
            return None
        finally:
            self.state = replace(self.state, pending_ids=self.state.pending_ids - ids)

        self._notifier.success(success)
        self.refresh()
        return result if result is not None else True

    def create_project(self, data: dict) -> Optional[Project]:
        return self._mutate(
            (),
            lambda: self._projects_service.create_project(agency_id=self._user.agency_id, data=data),
            success="Project created",
            failure="Failed to create project",
        )

    def update_project(self, project_id: str, patch: dict) -> Optional[Project]:
        return self._mutate(
            (project_id,),
            lambda: self._projects_service.update_project(
                agency_id=self._user.agency_id, project_id=str(project_id), patch=patch
            ),
            success="Project updated",
            failure="Failed to update project",
        )

    def delete_project(self, project_id: str) -> bool:
        self._require_destructive_role()
        ok = self._mutate(
            (project_id,),
            lambda: self._projects_service.delete_project(agency_id=self._user.agency_id, project_id=str(project_id)),
            success="Project deleted",
            failure="Failed to delete project",
        )
        return bool(ok)

    def archive_project(self, project_id: str) -> bool:
        ok = self._mutate(
            (project_id,),
            lambda: self._projects_service.archive_project(agency_id=self._user.agency_id, project_id=str(project_id)),
            success="Project archived",
            failure="Failed to archive project",
        )
        return bool(ok)

    def duplicate_project(self, project_id: str) -> Optional[Project]:
        return self._mutate(
            (project_id,),
            lambda: self._projects_service.duplicate_project(agency_id=self._user.agency_id, project_id=str(project_id)),
            success="Project duplicated",
            failure="Failed to duplicate project",
        )

    def toggle_favorite(self, project_id: str) -> bool:
        """Returns the new favorite flag."""
        project_id = str(project_id)
        try:
            if project_id in self._favorites:
                self._favorites_repo.remove(self._user.user_id, project_id)
                self._favorites = self._favorites - {project_id}
            else:
                self._favorites_repo.add(self._user.user_id, project_id)
                self._favorites = self._favorites | {project_id}
        except DomainError as e:
            logger.warning("favorite toggle failed id=%s: %s", project_id, e)
            self._notifier.error("Failed to update favorites")
        return project_id in self._favorites

    # ------------------------------------------------------------------
    # kanban drag & drop
    # ------------------------------------------------------------------

    def start_drag(self, project_id: str) -> None:
        self.state = replace(self.state, dragged_project_id=str(project_id))

    def end_drag(self) -> None:
        self.state = replace(self.state, dragged_project_id=None)

    def drop(self, status: Any) -> bool:
        """Move the dragged card into the `status` column.

        Dropping onto the column the card is already in is a no-op. The drag
        and pending markers are cleared before this returns, so callers over
        HTTP only ever see the settled state.
        """
        project_id = self.state.dragged_project_id
        if project_id is None:
            return False

        target = ProjectStatus.parse(status)
        project = self._find(project_id)
        if target not in KANBAN_STATUSES or project is None:
            self.end_drag()
            self._notifier.error("Cannot move project there")
            return False
        if ProjectStatus.parse(project.status) == target:
            self.end_drag()
            return False

        try:
            ok = self._mutate(
                (project_id,),
                lambda: self._projects_service.change_status(
                    agency_id=self._user.agency_id, project_id=project_id, status=target
                ),
                success=f"Moved to {target.value.replace('_', ' ')}",
                failure="Failed to update project status",
            )
        finally:
            self.end_drag()
        return ok is not None

    def move_project(self, project_id: str, status: Any) -> bool:
        self.start_drag(project_id)
        return self.drop(status)

    # ------------------------------------------------------------------
    # bulk actions
    # ------------------------------------------------------------------

    def _run_bulk(self, action: str, apply: Callable[[str], Any]) -> BulkResult:
        """Sequential per-id calls; failed ids stay selected, succeeded ids leave the selection."""
        ids = sorted(self.state.selection)
        if not ids:
            self._notifier.warning("No projects selected")
            return BulkResult(action=action)

        self.state = replace(self.state, pending_ids=self.state.pending_ids | frozenset(ids))
        succeeded: list[str] = []
        failed: dict[str, str] = {}
        try:
            for project_id in ids:
                try:
                    apply(project_id)
                except DomainError as e:
                    logger.warning("bulk %s failed id=%s: %s", action, project_id, e)
                    failed[project_id] = str(e)
                else:
                    succeeded.append(project_id)
        finally:
            self.state = replace(
                self.state,
                pending_ids=self.state.pending_ids - frozenset(ids),
                selection=frozenset(failed),
            )

        result = BulkResult(action=action, succeeded=tuple(succeeded), failed=failed)
        logger.info("bulk %s agency=%s ok=%d failed=%d", action, self._user.agency_id, len(succeeded), len(failed))
        if succeeded:
            self.refresh()
        if failed and succeeded:
            self._notifier.warning(f"{len(succeeded)} project(s) updated, {len(failed)} failed")
        elif failed:
            self._notifier.error(f"{action.capitalize()} failed for {len(failed)} project(s)")
        else:
            self._notifier.success(f"{len(succeeded)} project(s) updated")
        return result

    def bulk_status_change(self, status: Any) -> BulkResult:
        target = ProjectStatus.parse(status)
        if target == ProjectStatus.UNKNOWN:
            raise ValidationError(f"Unknown status: {status!r}")
        return self._run_bulk(
            "status change",
            lambda pid: self._projects_service.change_status(
                agency_id=self._user.agency_id, project_id=pid, status=target
            ),
        )

    def bulk_delete(self) -> BulkResult:
        self._require_destructive_role()
        return self._run_bulk(
            "delete",
            lambda pid: self._projects_service.delete_project(agency_id=self._user.agency_id, project_id=pid),
        )

    # ------------------------------------------------------------------
    # presentation payload
    # ------------------------------------------------------------------

    def project_payload(self, project: Project) -> dict:
        return {
            "id": project.project_id,
            "name": project.name,
            "project_code": project.project_code,
            "status": project.status.value,
            "priority": project.priority.value,
            "progress": project.progress,
            "budget": str(project.budget),
            "actual_cost": str(project.actual_cost),
            "currency": project.currency,
            "start_date": project.start_date.isoformat() if project.start_date else None,
            "deadline": project.deadline.isoformat() if project.deadline else None,
            "tags": sorted(project.tags),
            "client": project.client_name or None,
            "is_archived": project.is_archived,
            "is_favorite": project.project_id in self._favorites,
            "is_selected": project.project_id in self.state.selection,
            "is_pending": project.project_id in self.state.pending_ids,
            "health": self.health(project).to_dict(),
        }

    def board_payload(self) -> dict:
        visible = self.visible_projects()
        return {
            "projects": [self.project_payload(p) for p in self.page_projects()],
            "total": len(visible),
            "pages": self.total_pages(),
            "tags": self.available_tags(),
            "metrics": self.metrics().to_dict(),
            "state": self.state.to_dict(),
            "load_error": self.load_error,
        }
