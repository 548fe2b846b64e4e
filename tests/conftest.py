import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event

from sqlquest.main import app
from sqlquest.api.deps import get_controller, get_panel, get_progress
from sqlquest.core.challenges import CHALLENGES
from sqlquest.core.console import ConsolePanel, ProgressTracker
from sqlquest.core.database import create_challenge_engine
from sqlquest.core.engine.controller import ChallengeController


# Fresh SQLite file for every test so nothing leaks between them
@pytest_asyncio.fixture(scope="function")
async def challenge_engine(tmp_path):
    engine = create_challenge_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'challenge.db'}", busy_timeout=1
    )
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def conn(challenge_engine):
    async with challenge_engine.connect() as connection:
        yield connection


# Every statement the driver sees, to prove what did (not) reach the store
@pytest_asyncio.fixture(scope="function")
async def statement_log(challenge_engine):
    statements = []

    @event.listens_for(challenge_engine.sync_engine, "before_cursor_execute")
    def capture(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    yield statements
    event.remove(challenge_engine.sync_engine, "before_cursor_execute", capture)


@pytest_asyncio.fixture(scope="function")
async def run_sql(conn):
    """Run setup statements in their own committed transaction."""

    async def _run(*statements):
        def _execute(sync_conn):
            with sync_conn.begin():
                for statement in statements:
                    sync_conn.exec_driver_sql(statement)

        await conn.run_sync(_execute)

    return _run


@pytest_asyncio.fixture(scope="function")
async def scalar(conn):
    """Read one value outside of any submission."""

    async def _scalar(query):
        def _read(sync_conn):
            with sync_conn.begin():
                return sync_conn.exec_driver_sql(query).scalar()

        return await conn.run_sync(_read)

    return _scalar


@pytest_asyncio.fixture(scope="function")
async def panel():
    return ConsolePanel()


@pytest_asyncio.fixture(scope="function")
async def progress():
    return ProgressTracker(slots=len(CHALLENGES))


@pytest_asyncio.fixture(scope="function")
async def controller(conn, panel, progress):
    ctrl = ChallengeController(
        conn,
        report_feedback=panel.report_feedback,
        request_close=panel.request_close,
        mark_complete=progress.mark_complete,
    )
    yield ctrl
    ctrl.cancel_close()


# Client
@pytest_asyncio.fixture(scope="function")
async def client(controller, panel, progress):
    app.dependency_overrides[get_controller] = lambda: controller
    app.dependency_overrides[get_panel] = lambda: panel
    app.dependency_overrides[get_progress] = lambda: progress

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
