"""Filter & sort engine for the project board.

`apply_filters` runs independent predicate stages left to right (logical AND):

    archived -> status -> priority -> tags -> date range -> search

and then one stable sort. Every stage is a no-op at its default value, so
`apply_filters(projects, ProjectFilters())` returns all non-archived projects
sorted newest first.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Iterable, Optional, Sequence

from ..common.coerce import as_date, parse_flag, parse_tags, safe_number
from ..common.datetime_utils import format_date, parse_optional_date
from ..core.constants import DEFAULT_SORT_BY, DEFAULT_SORT_ORDER, SEARCH_MAX_LENGTH
from ..core.enums import PRIORITY_ORDINAL, STATUS_ORDINAL, Priority, ProjectStatus, SortKey, SortOrder
from ..core.exceptions import ValidationError
from .model import Project

ALL = "all"
FAVORITES = "favorites"


class StatusFilterKind(str, Enum):
    ALL = "all"
    FAVORITES = "favorites"
    EXACT = "exact"


@dataclass(frozen=True)
class StatusFilter:
    """All | Favorites | Exact(status).

    Favorites is a pseudo-status: it selects by the caller's favorite-id set
    instead of comparing the status field.
    """

    kind: StatusFilterKind = StatusFilterKind.ALL
    status: Optional[ProjectStatus] = None

    @classmethod
    def all(cls) -> "StatusFilter":
        return cls()

    @classmethod
    def favorites(cls) -> "StatusFilter":
        return cls(kind=StatusFilterKind.FAVORITES)

    @classmethod
    def exact(cls, status: ProjectStatus) -> "StatusFilter":
        return cls(kind=StatusFilterKind.EXACT, status=status)

    @classmethod
    def parse(cls, value: Any) -> "StatusFilter":
        if isinstance(value, StatusFilter):
            return value
        raw = (value.value if isinstance(value, Enum) else str(value or "")).strip().lower()
        if raw in ("", ALL):
            return cls.all()
        if raw == FAVORITES:
            return cls.favorites()
        status = ProjectStatus.parse(raw)
        if status == ProjectStatus.UNKNOWN:
            raise ValidationError(f"Unknown status filter: {value!r}")
        return cls.exact(status)

    def to_wire(self) -> str:
        if self.kind == StatusFilterKind.EXACT and self.status is not None:
            return self.status.value
        return FAVORITES if self.kind == StatusFilterKind.FAVORITES else ALL


@dataclass(frozen=True)
class DateRange:
    """Inclusive [date_from, date_to]; a missing bound is unbounded on that side."""

    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @property
    def is_empty(self) -> bool:
        return self.date_from is None and self.date_to is None

    def contains(self, value: date) -> bool:
        if self.date_from is not None and value < self.date_from:
            return False
        if self.date_to is not None and value > self.date_to:
            return False
        return True


def parse_priority_filter(value: Any) -> Optional[Priority]:
    """None means 'all'."""
    if value is None or isinstance(value, Priority):
        return value
    raw = str(value).strip().lower()
    if raw in ("", ALL):
        return None
    priority = Priority.parse(raw)
    if priority == Priority.UNKNOWN:
        raise ValidationError(f"Unknown priority filter: {value!r}")
    return priority


def parse_sort(value: str) -> tuple[SortKey, SortOrder]:
    """`priority_desc` / `created_at_asc` -> (key, order)."""
    raw = (value or "").strip().lower()
    if raw in {k.value for k in SortKey}:
        return SortKey(raw), SortOrder.DESC
    key, _, order = raw.rpartition("_")
    try:
        return SortKey(key), SortOrder(order)
    except ValueError:
        raise ValidationError(f"Unknown sort option: {value!r}")


def normalize_search(value: Any) -> str:
    return str(value or "").strip()[:SEARCH_MAX_LENGTH]


@dataclass(frozen=True)
class ProjectFilters:
    """Transient filter/sort state of the board (hashable, serializable)."""

    search: str = ""
    status: StatusFilter = field(default_factory=StatusFilter)
    priority: Optional[Priority] = None
    tags: frozenset[str] = field(default_factory=frozenset)
    date_range: DateRange = field(default_factory=DateRange)
    show_archived: bool = False
    sort_by: SortKey = SortKey.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC

    @property
    def sort(self) -> str:
        return f"{self.sort_by.value}_{self.sort_order.value}"

    @property
    def is_default(self) -> bool:
        return self == ProjectFilters()

    def with_search(self, value: Any) -> "ProjectFilters":
        return replace(self, search=normalize_search(value))

    def toggle_tag(self, tag: str) -> "ProjectFilters":
        tag = str(tag).strip()
        tags = self.tags - {tag} if tag in self.tags else self.tags | {tag}
        return replace(self, tags=frozenset(tags))

    def to_dict(self) -> dict:
        return {
            "search": self.search,
            "status": self.status.to_wire(),
            "priority": self.priority.value if self.priority else ALL,
            "tags": sorted(self.tags),
            "date_from": format_date(self.date_range.date_from) or None,
            "date_to": format_date(self.date_range.date_to) or None,
            "show_archived": self.show_archived,
            "sort": self.sort,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ProjectFilters":
        data = data or {}
        sort_by, sort_order = parse_sort(data.get("sort") or f"{DEFAULT_SORT_BY}_{DEFAULT_SORT_ORDER}")
        return cls(
            search=normalize_search(data.get("search")),
            status=StatusFilter.parse(data.get("status")),
            priority=parse_priority_filter(data.get("priority")),
            tags=parse_tags(data.get("tags")),
            date_range=DateRange(
                date_from=parse_optional_date(data.get("date_from")),
                date_to=parse_optional_date(data.get("date_to")),
            ),
            show_archived=parse_flag(data.get("show_archived"), "show_archived"),
            sort_by=sort_by,
            sort_order=sort_order,
        )


# ---------------------------------------------------------------------------
# predicate stages
# ---------------------------------------------------------------------------

Stage = Callable[[Project, ProjectFilters, frozenset], bool]


def _archived_stage(p: Project, f: ProjectFilters, favorites: frozenset) -> bool:
    # Toggle semantics: off -> hide archived, on -> only archived.
    return bool(p.is_archived) == f.show_archived


def _status_stage(p: Project, f: ProjectFilters, favorites: frozenset) -> bool:
    if f.status.kind == StatusFilterKind.FAVORITES:
        return p.project_id in favorites
    if f.status.kind == StatusFilterKind.EXACT:
        return ProjectStatus.parse(p.status) == f.status.status
    return True


def _priority_stage(p: Project, f: ProjectFilters, favorites: frozenset) -> bool:
    return f.priority is None or Priority.parse(p.priority) == f.priority


def _tag_stage(p: Project, f: ProjectFilters, favorites: frozenset) -> bool:
    # OR semantics: any selected tag is enough.
    return not f.tags or not f.tags.isdisjoint(p.tags or ())


def _date_stage(p: Project, f: ProjectFilters, favorites: frozenset) -> bool:
    if f.date_range.is_empty:
        return True
    start = as_date(p.start_date)
    return start is None or f.date_range.contains(start)


def _search_stage(p: Project, f: ProjectFilters, favorites: frozenset) -> bool:
    needle = normalize_search(f.search).casefold()
    if not needle:
        return True
    client = p.client
    haystack = (
        p.name,
        p.description,
        p.project_code,
        client.name if client else None,
        client.company_name if client else None,
    )
    return any(needle in str(value).casefold() for value in haystack if value)


STAGES: tuple[Stage, ...] = (
    _archived_stage,
    _status_stage,
    _priority_stage,
    _tag_stage,
    _date_stage,
    _search_stage,
)


# ---------------------------------------------------------------------------
# sorting
# ---------------------------------------------------------------------------

_EPOCH = datetime.min


def _created_key(p: Project):
    value = p.created_at
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    d = as_date(value)
    return datetime.combine(d, datetime.min.time()) if d else _EPOCH


SORT_KEYS: dict[SortKey, Callable[[Project], Any]] = {
    SortKey.CREATED_AT: _created_key,
    SortKey.NAME: lambda p: (p.name or "").casefold(),
    SortKey.STATUS: lambda p: STATUS_ORDINAL.get(ProjectStatus.parse(p.status), 0),
    SortKey.PRIORITY: lambda p: PRIORITY_ORDINAL.get(Priority.parse(p.priority), 0),
    SortKey.BUDGET: lambda p: safe_number(p.budget),
    SortKey.DEADLINE: lambda p: as_date(p.deadline) or date.min,
    SortKey.PROGRESS: lambda p: safe_number(p.progress),
}


def sort_projects(projects: Iterable[Project], sort_by: SortKey, sort_order: SortOrder) -> list[Project]:
    """Stable: equal keys keep input order in both directions."""
    return sorted(projects, key=SORT_KEYS[sort_by], reverse=sort_order == SortOrder.DESC)


# ---------------------------------------------------------------------------
# pipeline
# ---------------------------------------------------------------------------


def _run(projects: Sequence[Project], filters: ProjectFilters, favorites: frozenset) -> tuple[Project, ...]:
    visible = [p for p in projects if all(stage(p, filters, favorites) for stage in STAGES)]
    return tuple(sort_projects(visible, filters.sort_by, filters.sort_order))


@lru_cache(maxsize=32)
def _run_cached(projects: tuple[Project, ...], filters: ProjectFilters, favorites: frozenset) -> tuple[Project, ...]:
    return _run(projects, filters, favorites)


def apply_filters(
    projects: Iterable[Project],
    filters: Optional[ProjectFilters] = None,
    *,
    favorites: Iterable[str] = (),
) -> list[Project]:
    """Filter then sort. Memoized on (projects, filters, favorites)."""
    snapshot = tuple(projects)
    filters = filters or ProjectFilters()
    favorite_ids = frozenset(favorites)
    try:
        return list(_run_cached(snapshot, filters, favorite_ids))
    except TypeError:
        # unhashable record (e.g. tags given as a list); compute without the cache
        return list(_run(snapshot, filters, favorite_ids))


def extract_all_tags(projects: Iterable[Project]) -> list[str]:
    tags: set[str] = set()
    for p in projects:
        tags.update(p.tags or ())
    return sorted(tags)
