"""Create the agency_os database and its tables.

    APP_ENV=development python scripts/init_db.py
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.agency_os.agency_os.database.bootstrap import apply_schema, list_tables

logger = logging.getLogger("agency_os.init_db")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = list_tables(db_config)
    logger.info("schema applied to %s (%d tables: %s)", db_config.get("database"), len(tables), ", ".join(tables))
    return 0


if __name__ == "__main__":
    sys.exit(main())
