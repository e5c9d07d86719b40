from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector
from pymongo import ASCENDING
from pymongo.database import Database

from .connection import DBConfig

logger = logging.getLogger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a schema file on ``;`` outside quotes, dropping ``--`` comment lines."""
    buf: list[str] = []
    quote = None
    escape = False

    lines = [ln for ln in sql.splitlines() if not ln.lstrip().startswith("--")]
    for ch in "\n".join(lines):
        if escape:
            buf.append(ch)
            escape = False
            continue
        if ch == "\\" and quote:
            buf.append(ch)
            escape = True
            continue
        if ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
            buf.append(ch)
            continue
        if ch == ";" and quote is None:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(config: DBConfig) -> None:
    conn = mysql.connector.connect(
        host=config.host,
        port=config.port,
        user=config.user,
        password=config.password,
        use_pure=True,
    )
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(config: DBConfig, *, schema_path: str | Path) -> None:
    ensure_database_exists(config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = mysql.connector.connect(
        host=config.host,
        port=config.port,
        user=config.user,
        password=config.password,
        database=config.database,
        use_pure=True,
    )
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Applied %s to %s@%s/%s", Path(schema_path).name, config.user, config.host, config.database)


def ensure_mongo_indexes(db: Database) -> None:
    """Unique (person, date) indexes back the one-record-per-day rule."""
    students = db["student_attendance"]
    students.create_index([("student_id", ASCENDING), ("date", ASCENDING)], unique=True, name="uq_student_day")
    students.create_index([("class_id", ASCENDING), ("date", ASCENDING)], name="idx_class_day")
    students.create_index([("school_id", ASCENDING), ("date", ASCENDING)], name="idx_school_day")

    teachers = db["teacher_attendance"]
    teachers.create_index([("teacher_id", ASCENDING), ("date", ASCENDING)], unique=True, name="uq_teacher_day")
    teachers.create_index([("school_id", ASCENDING), ("date", ASCENDING)], name="idx_school_day")
    logger.info("Ensured attendance indexes on %s", db.name)


def list_tables(config: DBConfig) -> list[str]:
    conn = mysql.connector.connect(
        host=config.host,
        port=config.port,
        user=config.user,
        password=config.password,
        database=config.database,
        use_pure=True,
    )
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
