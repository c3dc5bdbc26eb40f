from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .common.errors import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_demo_data, list_tables
from .database.connection import DatabaseConnection, DBConfig
from .coordinators.controller import register as register_coordinators
from .students.controller import register as register_students
from .drives.controller import register as register_drives
from .reports.controller import register as register_reports

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "Welcome to the School Vaccination Management System API"


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        container = _container_from_settings(settings, settings_module)

    register_error_handlers(app)
    register_coordinators(app, container)
    register_students(app, container)
    register_drives(app, container)
    register_reports(app, container)

    @app.route("/", methods=["GET"], endpoint="index")
    def index():
        return jsonify({"message": WELCOME_MESSAGE})

    return app


def _container_from_settings(settings, settings_module: str) -> Container:
    jwt_secret = getattr(settings, "JWT_SECRET", None)
    if not jwt_secret:
        raise RuntimeError(f"JWT_SECRET is not configured ({settings_module})")

    db_config = getattr(settings, "DB_CONFIG")
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))
    logger.info("settings=%s db=%s", settings_module, conn.config.describe())

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(conn, schema_path=schema_path)
        logger.info("Schema ready (tables=%d)", len(list_tables(conn)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        ensure_demo_data(conn)

    return build_container(
        db_config=db_config,
        jwt_secret=jwt_secret,
        jwt_algorithm=getattr(settings, "JWT_ALGORITHM", "HS256"),
        token_expiry_days=int(getattr(settings, "TOKEN_EXPIRY_DAYS", 1)),
    )
