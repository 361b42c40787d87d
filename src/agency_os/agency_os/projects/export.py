from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable

from ..common.coerce import safe_number
from ..common.datetime_utils import format_date
from .model import Project

CSV_HEADERS = [
    "Project Name",
    "Project Code",
    "Client",
    "Status",
    "Priority",
    "Progress (%)",
    "Budget",
    "Actual Cost",
    "Start Date",
    "Deadline",
]


def _row(p: Project) -> dict:
    return {
        "Project Name": p.name or "",
        "Project Code": p.project_code or "",
        "Client": p.client_name or "No Client",
        "Status": p.status.value.replace("_", " "),
        "Priority": p.priority.value,
        "Progress (%)": int(safe_number(p.progress)),
        "Budget": f"{safe_number(p.budget):.2f}",
        "Actual Cost": f"{safe_number(p.actual_cost):.2f}",
        "Start Date": format_date(p.start_date),
        "Deadline": format_date(p.deadline),
    }


def projects_to_csv(projects: Iterable[Project]) -> bytes:
    """UTF-8 with BOM so spreadsheet apps pick the right encoding."""
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=CSV_HEADERS, quoting=csv.QUOTE_ALL)
    writer.writeheader()
    for p in projects:
        writer.writerow(_row(p))
    return out.getvalue().encode("utf-8-sig")


def export_filename(today: date) -> str:
    return f"projects_export_{today.strftime('%Y-%m-%d')}.csv"
