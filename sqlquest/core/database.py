import sqlite3
from pathlib import Path
from typing import List, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from sqlquest.core.config import settings


def create_challenge_engine(
    url: Optional[str] = None, busy_timeout: Optional[float] = None
) -> AsyncEngine:
    """
    Build the async engine for the challenge store.

    pysqlite's own transaction handling never opens a transaction before DDL,
    so a CREATE/ALTER/DROP would autocommit and could not be rolled back.
    We switch the driver to autocommit and emit BEGIN ourselves instead.
    """
    timeout = settings.BUSY_TIMEOUT_SECONDS if busy_timeout is None else busy_timeout
    engine = create_async_engine(url or settings.DATABASE_URL, echo=settings.ECHO_SQL)

    @event.listens_for(engine.sync_engine, "connect")
    def on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy's "begin" event own the BEGIN statement
        dbapi_connection.isolation_level = None

        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.execute(f"PRAGMA busy_timeout = {int(timeout * 1000)}")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


engine = create_challenge_engine()


def split_script(script: str) -> List[str]:
    """Split a setup script into single statements (trigger bodies stay whole)."""
    statements = []
    buffer = ""
    for char in script:
        buffer += char
        if char == ";" and sqlite3.complete_statement(buffer):
            statements.append(buffer.strip())
            buffer = ""
    if buffer.strip():
        statements.append(buffer.strip())
    return statements


async def run_schema_script(conn: AsyncConnection, path: str) -> int:
    """Seed the store from an external setup script, all or nothing."""
    statements = split_script(Path(path).read_text(encoding="utf-8"))

    def _run(sync_conn):
        with sync_conn.begin():
            for statement in statements:
                sync_conn.exec_driver_sql(statement)
        return len(statements)

    return await conn.run_sync(_run)
