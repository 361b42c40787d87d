from __future__ import annotations

import uuid
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import Priority, ProjectStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json_list, to_decimal
from .model import NewProject, Project
from .repository import ProjectRepository

_COLUMNS = """
    project_id, name, description, project_code, status, priority, progress,
    budget, actual_cost, currency, start_date, deadline, tags, client_id,
    is_archived, created_at
"""

# Columns a patch may touch; anything else is ignored.
UPDATABLE_COLUMNS = frozenset(
    {
        "name",
        "description",
        "project_code",
        "status",
        "priority",
        "progress",
        "budget",
        "actual_cost",
        "currency",
        "start_date",
        "deadline",
        "tags",
        "client_id",
    }
)


def _row_to_project(r: dict) -> Project:
    progress = int(r.get("progress") or 0)
    return Project(
        project_id=str(r["project_id"]),
        name=r.get("name") or "",
        status=ProjectStatus.parse(r.get("status")),
        priority=Priority.parse(r.get("priority")),
        progress=min(max(progress, 0), 100),
        budget=to_decimal(r.get("budget")),
        actual_cost=to_decimal(r.get("actual_cost")),
        currency=r.get("currency") or "USD",
        start_date=r.get("start_date"),
        deadline=r.get("deadline"),
        tags=frozenset(str(t) for t in load_json_list(r.get("tags"))),
        client_id=r.get("client_id"),
        description=r.get("description"),
        project_code=r.get("project_code"),
        is_archived=bool(r.get("is_archived")),
        created_at=r.get("created_at"),
    )


def _db_value(column: str, value: Any) -> Any:
    if column == "tags":
        return dump_json(sorted(value or []))
    if column in ("status", "priority") and hasattr(value, "value"):
        return value.value
    return value


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_agency(self, agency_id: int) -> Sequence[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM projects
                WHERE agency_id=%s
                ORDER BY created_at DESC
                """,
                (int(agency_id),),
            )
            return [_row_to_project(r) for r in fetchall(cur)]

    def get_by_id(self, agency_id: int, project_id: str) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM projects
                WHERE agency_id=%s AND project_id=%s
                """,
                (int(agency_id), str(project_id)),
            )
            r = fetchone(cur)
            return _row_to_project(r) if r else None

    def create(self, agency_id: int, data: NewProject) -> str:
        project_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO projects(
                    project_id, agency_id, name, description, project_code, status, priority,
                    progress, budget, actual_cost, currency, start_date, deadline, tags, client_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    project_id,
                    int(agency_id),
                    data.name,
                    data.description,
                    data.project_code,
                    data.status.value,
                    data.priority.value,
                    int(data.progress),
                    data.budget,
                    data.actual_cost,
                    data.currency,
                    data.start_date,
                    data.deadline,
                    dump_json(sorted(data.tags)),
                    data.client_id,
                ),
            )
        return project_id

    def update(self, agency_id: int, project_id: str, changes: Mapping[str, Any]) -> bool:
        columns = [c for c in changes if c in UPDATABLE_COLUMNS]
        if not columns:
            return False

        assignments = ", ".join(f"{c}=%s" for c in columns)
        params = [_db_value(c, changes[c]) for c in columns]
        params.extend([int(agency_id), str(project_id)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE projects SET {assignments} WHERE agency_id=%s AND project_id=%s",
                tuple(params),
            )
            return cur.rowcount > 0

    def delete(self, agency_id: int, project_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM projects WHERE agency_id=%s AND project_id=%s",
                (int(agency_id), str(project_id)),
            )
            return cur.rowcount > 0

    def set_archived(self, agency_id: int, project_id: str, *, archived: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE projects SET is_archived=%s WHERE agency_id=%s AND project_id=%s",
                (1 if archived else 0, int(agency_id), str(project_id)),
            )
            return cur.rowcount > 0
