from __future__ import annotations

from typing import Iterable, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .repository import SelectionRepository


class MySQLSelectionRepository(SelectionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_ids(self, user_id: int) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT project_id FROM board_selections WHERE user_id=%s",
                (int(user_id),),
            )
            return [str(r["project_id"]) for r in fetchall(cur)]

    def replace(self, user_id: int, project_ids: Iterable[str]) -> None:
        rows = [(int(user_id), str(pid)) for pid in sorted(set(project_ids))]
        with db_cursor(self._conn_factory) as (_, cur):
            # one transaction: readers never see a half-written selection
            cur.execute("DELETE FROM board_selections WHERE user_id=%s", (int(user_id),))
            if rows:
                cur.executemany(
                    "INSERT INTO board_selections(user_id, project_id) VALUES(%s,%s)",
                    rows,
                )
