from __future__ import annotations

import importlib
import logging
import logging.config
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from school_attendance.database.bootstrap import apply_schema, ensure_mongo_indexes, list_tables
from school_attendance.database.connection import DBConfig
from school_attendance.database.mongo_connection import MongoConfig, MongoConnection

logger = logging.getLogger("school_attendance.scripts.init_db")


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    logging.config.dictConfig(settings.LOGGING)

    if str(settings.STORAGE_BACKEND).lower() == "mongo":
        mongo_config = MongoConfig.from_settings(settings.MONGO_CONFIG)
        ensure_mongo_indexes(MongoConnection.get_instance(mongo_config).database())
        logger.info("OK: Mongo indexes ready on %s", mongo_config.database)
        return

    db_config = DBConfig.from_settings(settings.DB_CONFIG)
    schema_path = REPO_ROOT / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)
    tables = list_tables(db_config)
    logger.info(
        "OK: Applied schema.sql -> %s@%s:%s/%s (tables=%d)",
        db_config.user,
        db_config.host,
        db_config.port,
        db_config.database,
        len(tables),
    )


if __name__ == "__main__":
    main()
