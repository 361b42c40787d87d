from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from src.agency_os.agency_os.core.enums import Priority, ProjectStatus, SortKey, SortOrder
from src.agency_os.agency_os.core.exceptions import ValidationError
from src.agency_os.agency_os.projects.client_model import Client
from src.agency_os.agency_os.projects.filters import (
    DateRange,
    ProjectFilters,
    StatusFilter,
    StatusFilterKind,
    apply_filters,
    extract_all_tags,
    normalize_search,
    parse_sort,
    sort_projects,
)
from src.agency_os.agency_os.projects.model import Project

ACME = Client(client_id="c1", name="Jane Doe", company_name="Acme Corp")


def _p(pid: str, name: str, **kwargs) -> Project:
    return Project(project_id=pid, name=name, **kwargs)


@pytest.fixture
def projects() -> list[Project]:
    return [
        _p(
            "1",
            "Website Redesign",
            status=ProjectStatus.ACTIVE,
            priority=Priority.HIGH,
            budget=Decimal("1000"),
            actual_cost=Decimal("1200"),
            progress=50,
            tags=frozenset({"web", "design"}),
            start_date=date(2026, 1, 10),
            client=ACME,
            client_id="c1",
            created_at=datetime(2026, 1, 1, 9, 0),
        ),
        _p(
            "2",
            "Mobile App",
            status=ProjectStatus.IN_PROGRESS,
            priority=Priority.CRITICAL,
            budget=Decimal("5000"),
            progress=30,
            tags=frozenset({"mobile"}),
            start_date=date(2026, 2, 1),
            description="iOS and Android build",
            created_at=datetime(2026, 1, 3, 9, 0),
        ),
        _p(
            "3",
            "Brand Guidelines",
            status=ProjectStatus.COMPLETED,
            priority=Priority.LOW,
            budget=Decimal("500"),
            actual_cost=Decimal("400"),
            progress=100,
            tags=frozenset({"design"}),
            start_date=date(2025, 11, 1),
            project_code="BR-01",
            created_at=datetime(2026, 1, 2, 9, 0),
        ),
        _p(
            "4",
            "SEO Audit",
            status=ProjectStatus.PLANNING,
            priority=Priority.MEDIUM,
            created_at=datetime(2026, 1, 4, 9, 0),
        ),
        _p(
            "5",
            "Old Intranet",
            status=ProjectStatus.COMPLETED,
            is_archived=True,
            tags=frozenset({"web"}),
            created_at=datetime(2025, 6, 1, 9, 0),
        ),
    ]


def _ids(items) -> list[str]:
    return [p.project_id for p in items]


def test_default_filters_hide_archived_and_sort_newest_first(projects):
    assert _ids(apply_filters(projects)) == ["4", "2", "3", "1"]


def test_show_archived_shows_only_archived(projects):
    result = apply_filters(projects, ProjectFilters(show_archived=True))

    assert _ids(result) == ["5"]


def test_exact_status_filter():
    items = [
        _p("1", "A", status=ProjectStatus.ACTIVE, priority=Priority.HIGH, budget=Decimal("1000"), actual_cost=Decimal("1200"), progress=50),
        _p("2", "B", status=ProjectStatus.COMPLETED, priority=Priority.LOW, budget=Decimal("500"), actual_cost=Decimal("400"), progress=100),
    ]

    result = apply_filters(items, ProjectFilters(status=StatusFilter.exact(ProjectStatus.ACTIVE)))

    assert _ids(result) == ["1"]


def test_favorites_pseudo_status_uses_favorite_ids(projects):
    filters = ProjectFilters(status=StatusFilter.favorites())

    assert _ids(apply_filters(projects, filters, favorites={"3", "1"})) == ["3", "1"]
    assert apply_filters(projects, filters) == []


def test_priority_filter(projects):
    result = apply_filters(projects, ProjectFilters(priority=Priority.CRITICAL))

    assert _ids(result) == ["2"]


def test_search_is_case_insensitive_on_name():
    items = [_p("1", "Website Redesign"), _p("2", "Mobile App")]

    assert [p.name for p in apply_filters(items, ProjectFilters(search="web"))] == ["Website Redesign"]
    assert [p.name for p in apply_filters(items, ProjectFilters(search="WEB"))] == ["Website Redesign"]


def test_search_matches_client_description_and_code(projects):
    assert _ids(apply_filters(projects, ProjectFilters(search="acme"))) == ["1"]
    assert _ids(apply_filters(projects, ProjectFilters(search="android"))) == ["2"]
    assert _ids(apply_filters(projects, ProjectFilters(search="br-01"))) == ["3"]


def test_search_is_trimmed_and_truncated():
    assert normalize_search("  web  ") == "web"
    assert len(normalize_search("x" * 500)) == 200
    assert ProjectFilters().with_search("y" * 300).search == "y" * 200


def test_tag_filter_uses_or_semantics(projects):
    only_mobile = apply_filters(projects, ProjectFilters(tags=frozenset({"mobile"})))
    mobile_or_design = apply_filters(projects, ProjectFilters(tags=frozenset({"mobile", "design"})))

    assert _ids(only_mobile) == ["2"]
    assert _ids(mobile_or_design) == ["2", "3", "1"]


def test_adding_a_tag_never_shrinks_the_result(projects):
    filters = ProjectFilters()
    previous = None
    for tag in ["web", "mobile", "design", "unused"]:
        filters = filters.toggle_tag(tag)
        size = len(apply_filters(projects, filters))
        if previous is not None:
            assert size >= previous
        previous = size


def test_narrowing_status_never_grows_the_result(projects):
    everything = apply_filters(projects, ProjectFilters())
    for status in ProjectStatus:
        if status == ProjectStatus.UNKNOWN:
            continue
        narrowed = apply_filters(projects, ProjectFilters(status=StatusFilter.exact(status)))
        assert len(narrowed) <= len(everything)


def test_date_range_is_inclusive_and_missing_start_passes(projects):
    filters = ProjectFilters(date_range=DateRange(date(2026, 1, 10), date(2026, 2, 1)))

    assert _ids(apply_filters(projects, filters)) == ["4", "2", "1"]


def test_open_ended_date_range(projects):
    filters = ProjectFilters(date_range=DateRange(date_to=date(2025, 12, 31)))

    assert _ids(apply_filters(projects, filters)) == ["4", "3"]


def test_stages_combine_with_and(projects):
    filters = ProjectFilters(tags=frozenset({"design"}), status=StatusFilter.exact(ProjectStatus.ACTIVE))

    assert _ids(apply_filters(projects, filters)) == ["1"]


def test_priority_sort_is_ordinal_not_lexicographic():
    items = [
        _p("a", "A", priority=Priority.LOW),
        _p("b", "B", priority=Priority.CRITICAL),
        _p("c", "C", priority=Priority.MEDIUM),
    ]

    result = apply_filters(items, ProjectFilters(sort_by=SortKey.PRIORITY, sort_order=SortOrder.DESC))

    assert [p.priority for p in result] == [Priority.CRITICAL, Priority.MEDIUM, Priority.LOW]


def test_status_sort_follows_lifecycle(projects):
    result = sort_projects(projects, SortKey.STATUS, SortOrder.ASC)

    assert [p.status for p in result] == [
        ProjectStatus.PLANNING,
        ProjectStatus.ACTIVE,
        ProjectStatus.IN_PROGRESS,
        ProjectStatus.COMPLETED,
        ProjectStatus.COMPLETED,
    ]


def test_missing_values_sort_smallest():
    items = [_p("a", "A", deadline=date(2026, 5, 1)), _p("b", "B"), _p("c", "C", deadline=date(2026, 4, 1))]

    assert _ids(sort_projects(items, SortKey.DEADLINE, SortOrder.ASC)) == ["b", "c", "a"]
    assert _ids(sort_projects(items, SortKey.DEADLINE, SortOrder.DESC)) == ["a", "c", "b"]


@pytest.mark.parametrize("sort_by", list(SortKey))
@pytest.mark.parametrize("sort_order", list(SortOrder))
def test_sort_is_stable_for_equal_keys(sort_by, sort_order):
    # identical sort fields, different ids
    items = [_p(str(i), "Same", priority=Priority.HIGH, status=ProjectStatus.ACTIVE) for i in range(6)]

    result = sort_projects(items, sort_by, sort_order)

    assert _ids(result) == ["0", "1", "2", "3", "4", "5"]


def test_stable_sort_keeps_input_order_among_ties():
    items = [
        _p("x", "X", budget=Decimal("100")),
        _p("y", "Y", budget=Decimal("50")),
        _p("z", "Z", budget=Decimal("100")),
    ]

    assert _ids(sort_projects(items, SortKey.BUDGET, SortOrder.DESC)) == ["x", "z", "y"]
    assert _ids(sort_projects(items, SortKey.BUDGET, SortOrder.ASC)) == ["y", "x", "z"]


def test_filtering_is_idempotent(projects):
    filters = ProjectFilters(search="e", tags=frozenset({"design", "web"}), sort_by=SortKey.NAME, sort_order=SortOrder.ASC)

    first = apply_filters(projects, filters)
    second = apply_filters(projects, filters)

    assert first == second
    assert apply_filters(first, filters) == first


def test_unhashable_records_are_still_filtered():
    items = [_p("1", "Web", tags=["web"]), _p("2", "App", tags=["mobile"])]

    assert _ids(apply_filters(items, ProjectFilters(tags=frozenset({"web"})))) == ["1"]


def test_malformed_records_do_not_raise():
    items = [
        _p("1", None, status="weird", priority=None, budget=None, progress="?", created_at="yesterday"),
        _p("2", "Normal"),
    ]

    for key in SortKey:
        assert len(apply_filters(items, ProjectFilters(sort_by=key, search=""))) == 2
    assert _ids(apply_filters(items, ProjectFilters(search="norm"))) == ["2"]


def test_parse_sort():
    assert parse_sort("priority_desc") == (SortKey.PRIORITY, SortOrder.DESC)
    assert parse_sort("created_at_asc") == (SortKey.CREATED_AT, SortOrder.ASC)
    assert parse_sort("created_at") == (SortKey.CREATED_AT, SortOrder.DESC)
    with pytest.raises(ValidationError):
        parse_sort("colour_desc")


def test_status_filter_parse():
    assert StatusFilter.parse("all").kind == StatusFilterKind.ALL
    assert StatusFilter.parse("favorites").kind == StatusFilterKind.FAVORITES
    assert StatusFilter.parse("on_hold") == StatusFilter.exact(ProjectStatus.ON_HOLD)
    with pytest.raises(ValidationError):
        StatusFilter.parse("archived-ish")


def test_filters_wire_round_trip():
    filters = ProjectFilters(
        search="web",
        status=StatusFilter.favorites(),
        priority=Priority.HIGH,
        tags=frozenset({"b", "a"}),
        date_range=DateRange(date(2026, 1, 1), None),
        show_archived=True,
        sort_by=SortKey.BUDGET,
        sort_order=SortOrder.ASC,
    )

    data = filters.to_dict()

    assert data["tags"] == ["a", "b"]
    assert data["sort"] == "budget_asc"
    assert data["date_from"] == "2026-01-01"
    assert ProjectFilters.from_dict(data) == filters
    assert ProjectFilters.from_dict(None).is_default


def test_toggle_tag_twice_restores_filters():
    filters = ProjectFilters()

    assert filters.toggle_tag("web").toggle_tag("web") == filters


def test_extract_all_tags(projects):
    assert extract_all_tags(projects) == ["design", "mobile", "web"]
    assert extract_all_tags([replace(projects[3], tags=frozenset())]) == []


def test_from_dict_reads_tag_string_as_comma_separated():
    assert ProjectFilters.from_dict({"tags": "web"}).tags == {"web"}
    assert ProjectFilters.from_dict({"tags": "web, design,"}).tags == {"web", "design"}
    assert ProjectFilters.from_dict({"tags": ["web", " "]}).tags == {"web"}
    with pytest.raises(ValidationError):
        ProjectFilters.from_dict({"tags": {"web": True}})


def test_from_dict_parses_show_archived_strings():
    assert ProjectFilters.from_dict({"show_archived": "false"}).show_archived is False
    assert ProjectFilters.from_dict({"show_archived": "0"}).show_archived is False
    assert ProjectFilters.from_dict({"show_archived": "on"}).show_archived is True
    assert ProjectFilters.from_dict({"show_archived": 1}).show_archived is True
    with pytest.raises(ValidationError):
        ProjectFilters.from_dict({"show_archived": "sometimes"})
