from __future__ import annotations

import importlib
import logging
import logging.config
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_mongo_indexes, list_tables
from .database.connection import DBConfig
from .database.mongo_connection import MongoConfig, MongoConnection
from .reports.controller import register as register_reports

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def _init_storage(settings) -> None:
    backend = str(getattr(settings, "STORAGE_BACKEND", "mysql")).lower()
    if backend == "mongo":
        mongo = MongoConnection.get_instance(MongoConfig.from_settings(getattr(settings, "MONGO_CONFIG", {})))
        ensure_mongo_indexes(mongo.database())
        return
    db_config = DBConfig.from_settings(getattr(settings, "DB_CONFIG", {}))
    apply_schema(db_config, schema_path=SCHEMA_PATH)
    logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    """Application factory.

    Tests pass a prebuilt ``container``; storage bootstrap is skipped then.
    """

    load_dotenv(override=False)
    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)

    logging_settings = getattr(settings, "LOGGING", None)
    if logging_settings:
        logging.config.dictConfig(logging_settings)

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        backend = getattr(settings, "STORAGE_BACKEND", "mysql")
        logger.info("Starting with settings=%s backend=%s", settings_module, backend)
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            _init_storage(settings)
        container = build_container(
            storage_backend=backend,
            db_config=getattr(settings, "DB_CONFIG", None),
            mongo_config=getattr(settings, "MONGO_CONFIG", None),
            tier_good_min=int(getattr(settings, "TIER_GOOD_MIN", 90)),
            tier_average_min=int(getattr(settings, "TIER_AVERAGE_MIN", 75)),
        )

    register_attendance(app, container)
    register_reports(app, container)
    return app
