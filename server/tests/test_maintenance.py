"""Tests for the migration and development seed scripts."""

import importlib.util
from pathlib import Path

import pytest
from sqlalchemy import create_engine, func, inspect, select

from galant.db.base import Base
from galant.models.schema import Schema

ROOT = Path(__file__).resolve().parents[2]


def load_module(path: Path, name: str):
    module_spec = importlib.util.spec_from_file_location(name, path)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


def test_initial_migration_creates_model_tables(tmp_path):
    from alembic.migration import MigrationContext
    from alembic.operations import Operations

    migration = load_module(ROOT / "server" / "alembic" / "versions" / "001_initial_schema.py", "initial_schema")
    engine = create_engine(f"sqlite:///{tmp_path / 'galant.db'}")

    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            migration.upgrade()
        inspector = inspect(conn)
        tables = set(inspector.get_table_names())
        event_columns = {c["name"] for c in inspector.get_columns("schema_events")}

    assert tables == set(Base.metadata.tables)
    assert event_columns == {c.name for c in Base.metadata.tables["schema_events"].columns}
    engine.dispose()


@pytest.mark.asyncio
async def test_seed_is_idempotent(db_session):
    seed = load_module(ROOT / "scripts" / "seed_db.py", "seed_db")

    first = await seed.seed_database(db_session)
    second = await seed.seed_database(db_session)

    assert first == {"users": 1, "schemata": 4, "music_sources": 1}
    assert second == {"users": 0, "schemata": 0, "music_sources": 0}
    count = (await db_session.execute(select(func.count()).select_from(Schema))).scalar_one()
    assert count == 4
