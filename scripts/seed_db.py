from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.geo_attendance.geo_attendance.common.logging_config import configure_logging
from src.geo_attendance.geo_attendance.database.bootstrap import apply_seed_sql
from src.geo_attendance.geo_attendance.database.connection import DBConfig

logger = logging.getLogger("scripts.seed_db")


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    configure_logging(level=getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    logger.info("Seeded divisions, campuses and office locations -> %s", DBConfig.from_mapping(db_config).describe())


if __name__ == "__main__":
    main()
