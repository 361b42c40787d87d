from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import DataAccessError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (conn, cursor); commit on success, rollback and re-raise as DataAccessError on failure."""
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        logger.exception("database connection failed")
        raise DataAccessError("Database is unavailable") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        conn.rollback()
        logger.exception("database query failed")
        raise DataAccessError(str(e)) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def placeholders(count: int) -> str:
    """`%s,%s,...` for IN clauses."""
    return ",".join(["%s"] * int(count))


def to_decimal(value: Any) -> Decimal:
    """Normalize DECIMAL/float/None/str columns; anything unparsable becomes 0."""
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except ArithmeticError:
        return Decimal("0")


def load_json_list(value: Any) -> list:
    """Normalize a JSON column that should hold a list.

    mysql-connector can return JSON as:
    - str / bytes (pure-python connector)
    - already-decoded list
    - None
    """

    if value is None:
        return []
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            value = json.loads(value)
        except ValueError:
            logger.warning("ignoring malformed JSON list column: %r", value[:80])
            return []
    return list(value) if isinstance(value, (list, tuple)) else []


def load_json_dict(value: Any) -> dict:
    if value is None:
        return {}
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        try:
            value = json.loads(value) if value.strip() else {}
        except ValueError:
            logger.warning("ignoring malformed JSON object column: %r", value[:80])
            return {}
    return dict(value) if isinstance(value, dict) else {}


def dump_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)
