from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .repository import FavoriteRepository


class MySQLFavoriteRepository(FavoriteRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_ids(self, user_id: int) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT project_id FROM project_favorites WHERE user_id=%s",
                (int(user_id),),
            )
            return [str(r["project_id"]) for r in fetchall(cur)]

    def add(self, user_id: int, project_id: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            # INSERT IGNORE keeps add() idempotent on the composite primary key
            cur.execute(
                "INSERT IGNORE INTO project_favorites(user_id, project_id) VALUES(%s,%s)",
                (int(user_id), str(project_id)),
            )

    def remove(self, user_id: int, project_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM project_favorites WHERE user_id=%s AND project_id=%s",
                (int(user_id), str(project_id)),
            )
            return cur.rowcount > 0
