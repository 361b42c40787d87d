from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.agency_os.agency_os.core.enums import HealthStatus, ProjectStatus
from src.agency_os.agency_os.projects.health.base import HealthRule
from src.agency_os.agency_os.projects.health.calculator import (
    HealthScoreCalculator,
    calculate_health_score,
    classify,
)
from src.agency_os.agency_os.projects.model import Project

TODAY = date(2026, 3, 1)


def _project(**kwargs) -> Project:
    kwargs.setdefault("project_id", "p1")
    kwargs.setdefault("name", "Website Redesign")
    kwargs.setdefault("status", ProjectStatus.ACTIVE)
    return Project(**kwargs)


def test_perfect_project_scores_100():
    hs = calculate_health_score(_project(), today=TODAY)

    assert hs.score == 100
    assert hs.status == HealthStatus.HEALTHY


def test_budget_overrun_of_twenty_percent_is_warning():
    p = _project(budget=Decimal("1000"), actual_cost=Decimal("1200"), progress=50)

    hs = calculate_health_score(p, today=TODAY)

    assert hs.score == 60
    assert hs.status == HealthStatus.WARNING


def test_budget_penalty_is_capped():
    p = _project(budget=Decimal("100"), actual_cost=Decimal("10000"))

    assert HealthScoreCalculator().breakdown(p, today=TODAY)["budget"] == 60


def test_under_budget_has_no_budget_penalty():
    p = _project(budget=Decimal("500"), actual_cost=Decimal("400"))

    assert HealthScoreCalculator().breakdown(p, today=TODAY)["budget"] == 0


def test_overdue_penalty_grows_per_day_and_caps():
    calc = HealthScoreCalculator()

    one_day = calc.breakdown(_project(deadline=date(2026, 2, 28)), today=TODAY)["schedule"]
    ten_days = calc.breakdown(_project(deadline=date(2026, 2, 19)), today=TODAY)["schedule"]
    long_ago = calc.breakdown(_project(deadline=date(2025, 1, 1)), today=TODAY)["schedule"]

    assert one_day == 25
    assert ten_days == 34
    assert long_ago == 40


def test_deadline_within_a_week_costs_ten_points():
    hs = calculate_health_score(_project(deadline=date(2026, 3, 4)), today=TODAY)

    assert hs.score == 90


def test_deadline_today_counts_as_near_not_overdue():
    assert HealthScoreCalculator().breakdown(_project(deadline=TODAY), today=TODAY)["schedule"] == 10


@pytest.mark.parametrize("status", [ProjectStatus.COMPLETED, ProjectStatus.CANCELLED])
def test_closed_projects_are_not_penalized_for_schedule(status):
    p = _project(status=status, deadline=date(2025, 6, 1), start_date=date(2025, 1, 1), progress=10)

    assert calculate_health_score(p, today=TODAY).score == 100


def test_stagnation_penalty_when_window_mostly_elapsed_and_progress_low():
    p = _project(start_date=date(2026, 1, 1), deadline=date(2026, 3, 11), progress=20)

    breakdown = HealthScoreCalculator().breakdown(p, today=TODAY)

    assert breakdown["stagnation"] == 15
    assert breakdown["schedule"] == 0
    assert calculate_health_score(p, today=TODAY).score == 85


def test_no_stagnation_when_progress_keeps_up():
    p = _project(start_date=date(2026, 1, 1), deadline=date(2026, 3, 11), progress=80)

    assert HealthScoreCalculator().breakdown(p, today=TODAY)["stagnation"] == 0


def test_score_is_clamped_to_zero_and_critical():
    p = _project(
        budget=Decimal("100"),
        actual_cost=Decimal("1000"),
        start_date=date(2025, 1, 1),
        deadline=date(2025, 6, 1),
        progress=5,
    )

    hs = calculate_health_score(p, today=TODAY)

    assert hs.score == 0
    assert hs.status == HealthStatus.CRITICAL


def test_malformed_fields_are_neutral():
    p = _project(budget=None, actual_cost="n/a", progress=None, deadline="not-a-date", start_date=None)

    hs = calculate_health_score(p, today=TODAY)

    assert hs.score == 100
    assert hs.status == HealthStatus.HEALTHY


@pytest.mark.parametrize(
    "score, expected",
    [
        (100, HealthStatus.HEALTHY),
        (85, HealthStatus.HEALTHY),
        (70, HealthStatus.HEALTHY),
        (69, HealthStatus.WARNING),
        (55, HealthStatus.WARNING),
        (40, HealthStatus.WARNING),
        (39, HealthStatus.CRITICAL),
        (20, HealthStatus.CRITICAL),
        (0, HealthStatus.CRITICAL),
    ],
)
def test_classify_thresholds(score, expected):
    assert classify(score) == expected


def test_score_bounds_and_status_consistency_over_many_projects():
    projects = [
        _project(
            project_id=str(i),
            budget=Decimal(b),
            actual_cost=Decimal(a),
            progress=pr,
            deadline=dl,
            start_date=date(2025, 12, 1),
        )
        for i, (b, a, pr, dl) in enumerate(
            [
                ("0", "500", 0, None),
                ("1000", "999", 100, date(2026, 5, 1)),
                ("1000", "5000", 10, date(2026, 2, 1)),
                ("250", "300", 45, date(2026, 3, 2)),
                ("10", "0", 70, date(2027, 1, 1)),
            ]
        )
    ]

    for p in projects:
        hs = calculate_health_score(p, today=TODAY)
        assert 0 <= hs.score <= 100
        assert hs.status == classify(hs.score)


def test_custom_rule_set():
    class FlatRule(HealthRule):
        name = "flat"

        def penalty(self, project, *, today):
            return 45

    calc = HealthScoreCalculator(rules=[FlatRule()])

    assert calc.calculate(_project(), today=TODAY).score == 55
    assert calc.breakdown(_project(), today=TODAY) == {"flat": 45}


def test_health_score_serializes():
    hs = calculate_health_score(_project(budget=Decimal("1000"), actual_cost=Decimal("1200")), today=TODAY)

    assert hs.to_dict() == {"score": 60, "status": "warning"}
