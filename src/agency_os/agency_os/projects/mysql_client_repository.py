from __future__ import annotations

from typing import Iterable, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, placeholders
from .client_model import Client
from .client_repository import ClientRepository


def _row_to_client(r: dict) -> Client:
    return Client(
        client_id=str(r["client_id"]),
        name=r.get("name") or "",
        company_name=r.get("company_name"),
        email=r.get("email"),
    )


class MySQLClientRepository(ClientRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_many(self, agency_id: int, client_ids: Iterable[str]) -> Sequence[Client]:
        ids = sorted({str(i) for i in client_ids if i})
        if not ids:
            return []

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT client_id, name, company_name, email
                FROM clients
                WHERE agency_id=%s AND client_id IN ({placeholders(len(ids))})
                """,
                (int(agency_id), *ids),
            )
            return [_row_to_client(r) for r in fetchall(cur)]
