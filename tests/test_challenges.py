import pytest

from sqlquest.core.challenges import CATALOG, CHALLENGES, get_challenge
from sqlquest.core.database import run_schema_script, split_script
from sqlquest.core.schemas import SubmissionState


def test_catalog_indexes_are_unique():
    """Each phase has its own progress slot"""
    indexes = [c.challenge_index for c in CHALLENGES]
    assert len(set(indexes)) == len(indexes)
    assert len(CATALOG) == len(CHALLENGES)
    assert get_challenge("missing") is None


def test_sessions_built_from_catalog():
    """Catalog entries turn into ready-to-open sessions"""
    session = get_challenge("recolor-toy").to_session()
    assert session.allowed_operation == "UPDATE"
    assert session.validator is not None
    assert session.challenge_index == 2


def test_split_script_keeps_trigger_bodies_whole():
    """Semicolons inside BEGIN ... END do not split a trigger"""
    script = (
        "CREATE TABLE a (id INTEGER); CREATE TABLE b (id INTEGER);\n"
        "CREATE TRIGGER tr AFTER INSERT ON a BEGIN\n"
        "  INSERT INTO b VALUES (new.id);\n"
        "  INSERT INTO b VALUES (new.id + 1);\n"
        "END;\n"
    )
    statements = split_script(script)
    assert len(statements) == 3
    assert statements[2].startswith("CREATE TRIGGER") and statements[2].endswith("END;")


@pytest.mark.asyncio
async def test_seed_script(conn, scalar, tmp_path):
    """The bundled setup script seeds old_toys and suppliers"""
    script = tmp_path / "seed.sql"
    script.write_text(
        "CREATE TABLE suppliers (id INTEGER PRIMARY KEY, name TEXT);\n"
        "CREATE TABLE old_toys (id INTEGER PRIMARY KEY);\n"
        "INSERT INTO suppliers (name) VALUES ('Estrela');\n"
    )
    assert await run_schema_script(conn, str(script)) == 3
    assert await scalar("SELECT COUNT(*) FROM suppliers") == 1


async def _play(controller, key, sql):
    controller.open_phase(get_challenge(key).to_session())
    return await controller.submit(sql)


@pytest.mark.asyncio
async def test_toy_store_walkthrough(controller, progress, run_sql):
    """Every catalog phase can be solved in order"""
    await run_sql("CREATE TABLE old_toys (id INTEGER PRIMARY KEY)")

    steps = [
        (
            "create-toys",
            "CREATE TABLE toys (id INTEGER PRIMARY KEY, name TEXT NOT NULL, "
            "category TEXT, color TEXT, active INTEGER DEFAULT 1)",
        ),
        (
            "insert-toys",
            "INSERT INTO toys (name, color, active) VALUES "
            "('Yo-yo', 'red', 1), ('Kite', 'blue', 0), ('Top', 'green', 1)",
        ),
        ("recolor-toy", "UPDATE toys SET color = 'purple' WHERE name = 'Yo-yo'"),
        ("remove-inactive", "DELETE FROM toys WHERE active = 0"),
        ("add-price", "ALTER TABLE toys ADD COLUMN price REAL"),
        ("unique-names", "CREATE UNIQUE INDEX ux_toys_name ON toys (name)"),
        (
            "create-sales",
            "CREATE TABLE sales (id INTEGER PRIMARY KEY, "
            "toy_id INTEGER REFERENCES toys(id), qty INTEGER)",
        ),
        ("drop-old-toys", "DROP TABLE old_toys"),
    ]

    for key, sql in steps:
        outcome = await _play(controller, key, sql)
        assert outcome.state is SubmissionState.COMMITTED, (key, outcome.message)

    assert progress.completed() == list(range(len(CHALLENGES)))


@pytest.mark.asyncio
async def test_recolor_requires_single_row(controller, run_sql, scalar):
    """Updating two toys at once does not count"""
    await run_sql(
        "CREATE TABLE toys (id INTEGER PRIMARY KEY, name TEXT, color TEXT)",
        "INSERT INTO toys (name, color) VALUES ('a', 'red'), ('b', 'red')",
    )

    outcome = await _play(controller, "recolor-toy", "UPDATE toys SET color = 'blue'")

    assert outcome.state is SubmissionState.ROLLED_BACK
    assert await scalar("SELECT COUNT(*) FROM toys WHERE color = 'red'") == 2


@pytest.mark.asyncio
async def test_unique_names_accepts_quoted_index_name(controller, run_sql):
    """A unique index with a quoted name solves the unique-names phase"""
    await run_sql("CREATE TABLE toys (id INTEGER PRIMARY KEY, name TEXT)")

    outcome = await _play(
        controller, "unique-names", 'CREATE UNIQUE INDEX "toy-names" ON toys (name)'
    )

    assert outcome.state is SubmissionState.COMMITTED, outcome.message
