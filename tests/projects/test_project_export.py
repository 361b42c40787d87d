import csv
import io
from datetime import date
from decimal import Decimal

from src.agency_os.agency_os.core.enums import Priority, ProjectStatus
from src.agency_os.agency_os.projects.client_model import Client
from src.agency_os.agency_os.projects.export import CSV_HEADERS, export_filename, projects_to_csv
from src.agency_os.agency_os.projects.model import Project


def _rows(data: bytes) -> list[list[str]]:
    assert data.startswith(b"\xef\xbb\xbf")
    return list(csv.reader(io.StringIO(data.decode("utf-8-sig"))))


def test_export_writes_header_and_rows():
    projects = [
        Project(
            project_id="1",
            name="Website Redesign",
            project_code="WEB-1",
            status=ProjectStatus.IN_PROGRESS,
            priority=Priority.HIGH,
            progress=40,
            budget=Decimal("1000"),
            actual_cost=Decimal("1200.5"),
            start_date=date(2026, 1, 10),
            deadline=date(2026, 4, 1),
            client=Client(client_id="c1", name="Jane", company_name="Acme, Inc."),
        ),
        Project(project_id="2", name="Internal Wiki"),
    ]

    rows = _rows(projects_to_csv(projects))

    assert rows[0] == CSV_HEADERS
    assert rows[1] == [
        "Website Redesign",
        "WEB-1",
        "Acme, Inc.",
        "in progress",
        "high",
        "40",
        "1000.00",
        "1200.50",
        "2026-01-10",
        "2026-04-01",
    ]
    assert rows[2][2] == "No Client"
    assert rows[2][8:] == ["", ""]


def test_export_of_nothing_is_only_the_header():
    assert _rows(projects_to_csv([])) == [CSV_HEADERS]


def test_export_filename():
    assert export_filename(date(2026, 3, 1)) == "projects_export_2026-03-01.csv"
