from decimal import Decimal

from src.agency_os.agency_os.core.enums import ProjectStatus
from src.agency_os.agency_os.projects.metrics import compute_metrics
from src.agency_os.agency_os.projects.model import Project


def test_metrics_counts_and_variance():
    projects = [
        Project(project_id="1", name="A", status=ProjectStatus.ACTIVE, budget=Decimal("1000"), actual_cost=Decimal("1200")),
        Project(project_id="2", name="B", status=ProjectStatus.IN_PROGRESS, budget=Decimal("500"), actual_cost=Decimal("100")),
        Project(project_id="3", name="C", status=ProjectStatus.COMPLETED, budget=Decimal("500"), actual_cost=Decimal("200")),
        Project(project_id="4", name="D", status=ProjectStatus.PLANNING),
    ]

    m = compute_metrics(projects)

    assert m.total_projects == 4
    assert m.active_projects == 2
    assert m.completed_projects == 1
    assert m.over_budget_projects == 1
    assert m.total_budget == 2000.0
    assert m.total_actual_cost == 1500.0
    assert m.budget_variance == -25.0


def test_metrics_of_empty_collection():
    m = compute_metrics([])

    assert m.total_projects == 0
    assert m.budget_variance == 0.0
    assert m.to_dict()["over_budget_projects"] == 0


def test_metrics_ignore_malformed_numbers():
    m = compute_metrics([Project(project_id="1", name="A", budget=None, actual_cost="oops")])

    assert m.total_budget == 0.0
    assert m.over_budget_projects == 0
