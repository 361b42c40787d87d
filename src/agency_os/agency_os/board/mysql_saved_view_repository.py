from __future__ import annotations

import uuid
from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, load_json_dict
from ..projects.filters import ProjectFilters
from .model import SavedView
from .repository import SavedViewRepository


def _row_to_view(r: dict) -> SavedView:
    return SavedView(
        view_id=str(r["view_id"]),
        name=r.get("name") or "",
        filters=ProjectFilters.from_dict(load_json_dict(r.get("filters"))),
        created_at=r.get("created_at"),
    )


class MySQLSavedViewRepository(SavedViewRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_user(self, agency_id: int, user_id: int) -> Sequence[SavedView]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT view_id, name, filters, created_at
                FROM saved_views
                WHERE agency_id=%s AND user_id=%s
                ORDER BY created_at ASC, name ASC
                """,
                (int(agency_id), int(user_id)),
            )
            return [_row_to_view(r) for r in fetchall(cur)]

    def create(self, agency_id: int, user_id: int, *, name: str, filters: ProjectFilters) -> SavedView:
        view_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO saved_views(view_id, agency_id, user_id, name, filters)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (view_id, int(agency_id), int(user_id), name, dump_json(filters.to_dict())),
            )
        return SavedView(view_id=view_id, name=name, filters=filters)

    def delete(self, agency_id: int, user_id: int, view_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM saved_views WHERE agency_id=%s AND user_id=%s AND view_id=%s",
                (int(agency_id), int(user_id), str(view_id)),
            )
            return cur.rowcount > 0
