"""Idempotent schema setup for the daily records database."""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import mysql.connector

from ..core.exceptions import StoreError
from .connection import DBConfig

logger = logging.getLogger(__name__)

_CREATE_DB_RE = re.compile(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$")
_USE_RE = re.compile(r"(?im)^\s*USE\b.*?;\s*$")
_LINE_COMMENT_RE = re.compile(r"(?m)^\s*--.*$")


@contextmanager
def _server(cfg: DBConfig, *, with_database: bool = True):
    kwargs = dict(
        host=cfg.host,
        port=cfg.port,
        user=cfg.user,
        password=cfg.password,
        charset=cfg.charset,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = cfg.database
    try:
        conn = mysql.connector.connect(**kwargs)
    except mysql.connector.Error as exc:
        raise StoreError(f"Cannot reach MySQL at {cfg.host}:{cfg.port}: {exc}") from exc
    try:
        yield conn
    except mysql.connector.Error as exc:
        raise StoreError(f"Schema setup failed: {exc}") from exc
    finally:
        conn.close()


def _schema_body(sql: str) -> str:
    # the configured database name wins over whatever schema.sql names
    sql = _CREATE_DB_RE.sub("", sql)
    sql = _USE_RE.sub("", sql)
    return _LINE_COMMENT_RE.sub("", sql)


def split_statements(sql: str) -> Iterator[str]:
    """Split a schema file on ';', ignoring semicolons inside quoted literals."""

    start = 0
    quote = None
    i = 0
    while i < len(sql):
        ch = sql[i]
        if quote:
            if ch == "\\":
                i += 1
            elif ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == ";":
            stmt = sql[start:i].strip()
            if stmt:
                yield stmt
            start = i + 1
        i += 1

    tail = sql[start:].strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    cfg = DBConfig.from_dict(db_config)
    with _server(cfg, with_database=False) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{cfg.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> int:
    """Create the database and its tables if missing. Returns the statement count."""

    ensure_database_exists(db_config)
    statements = list(split_statements(_schema_body(Path(schema_path).read_text(encoding="utf-8"))))

    with _server(DBConfig.from_dict(db_config)) as conn:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()

    logger.info("Applied %d schema statement(s) from %s", len(statements), schema_path)
    return len(statements)


def list_tables(db_config: dict) -> list[str]:
    with _server(DBConfig.from_dict(db_config)) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
