from __future__ import annotations

import mysql.connector
from mysql.connector.constants import ClientFlag

from src.agency_os.agency_os.database.connection import DatabaseConnection, DBConfig


def test_connect_counts_matched_rows(monkeypatch):
    captured = {}

    def fake_connect(**kwargs):
        captured.update(kwargs)
        return object()

    monkeypatch.setattr(mysql.connector, "connect", fake_connect)
    conn = DatabaseConnection(DBConfig.from_dict({"database": "agency_os_test"}))

    conn.connect()

    # re-archiving an archived project must still report one row
    assert ClientFlag.FOUND_ROWS in captured["client_flags"]
    assert captured["database"] == "agency_os_test"
