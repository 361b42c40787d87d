"""Load demo clients/projects and the demo accounts (admin, pm, employee)."""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.agency_os.agency_os.database.bootstrap import apply_seed_sql, ensure_demo_users

logger = logging.getLogger("agency_os.seed_db")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    ensure_demo_users(db_config)
    logger.info("demo data loaded into %s", db_config.get("database"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
