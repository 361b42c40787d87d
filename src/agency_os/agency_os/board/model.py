from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.constants import DEFAULT_PAGE_SIZE, PAGE_SIZE_OPTIONS
from ..core.enums import ViewMode
from ..core.exceptions import ValidationError
from ..projects.filters import ProjectFilters

DEFAULT_VIEW_ID = "default"


@dataclass(frozen=True)
class SavedView:
    """A named snapshot of filter settings, owned by one user."""

    view_id: str
    name: str
    filters: ProjectFilters
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {"id": self.view_id, "name": self.name, "filters": self.filters.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> "SavedView":
        return cls(
            view_id=str(data["id"]),
            name=str(data.get("name") or ""),
            filters=ProjectFilters.from_dict(data.get("filters")),
        )


@dataclass(frozen=True)
class ViewState:
    """Everything the board remembers between two requests.

    Only the small keys of `to_session()` travel in the session cookie; the
    selection is stored through a `SelectionRepository` and saved views are
    reloaded from their repository. `dragged_project_id` and `pending_ids` only
    live for the duration of one mutation call and are never persisted.
    """

    view_mode: ViewMode = ViewMode.GRID
    filters: ProjectFilters = field(default_factory=ProjectFilters)
    selection: frozenset[str] = field(default_factory=frozenset)
    saved_views: tuple[SavedView, ...] = ()
    current_view_id: Optional[str] = None
    dragged_project_id: Optional[str] = None
    pending_ids: frozenset[str] = field(default_factory=frozenset)
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def to_session(self) -> dict:
        return {
            "view_mode": self.view_mode.value,
            "filters": self.filters.to_dict(),
            "current_view_id": self.current_view_id or DEFAULT_VIEW_ID,
            "page": self.page,
            "page_size": self.page_size,
        }

    def to_dict(self) -> dict:
        """Response payload: the session keys plus selection and in-flight markers."""
        data = self.to_session()
        data["selection"] = sorted(self.selection)
        data["dragged_project_id"] = self.dragged_project_id
        data["pending_ids"] = sorted(self.pending_ids)
        return data

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ViewState":
        """Rebuild from a session payload; malformed parts fall back to defaults."""
        data = data or {}
        try:
            filters = ProjectFilters.from_dict(data.get("filters"))
        except ValidationError:
            filters = ProjectFilters()
        page_size = data.get("page_size")
        if page_size not in PAGE_SIZE_OPTIONS:
            page_size = DEFAULT_PAGE_SIZE
        try:
            page = max(int(data.get("page") or 1), 1)
        except (TypeError, ValueError):
            page = 1
        current = data.get("current_view_id")
        try:
            view_mode = ViewMode.parse(data.get("view_mode") or ViewMode.GRID)
        except ValidationError:
            view_mode = ViewMode.GRID

        return cls(
            view_mode=view_mode,
            filters=filters,
            selection=frozenset(str(i) for i in data.get("selection") or []),
            current_view_id=None if current in (None, "", DEFAULT_VIEW_ID) else str(current),
            page=page,
            page_size=page_size,
        )


@dataclass(frozen=True)
class BulkResult:
    """Per-id outcome of a bulk action."""

    action: str
    succeeded: tuple[str, ...] = ()
    failed: dict = field(default_factory=dict)

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "succeeded": list(self.succeeded),
            "failed": dict(self.failed),
            "success_count": self.success_count,
            "failure_count": self.failure_count,
        }
