"""
The bundled Alembic revision builds (and drops) the full schema on SQLite.
"""

import pytest
from sqlalchemy import create_engine, inspect

from mes_api.db.base import Base
from mes_api.db.config import get_settings
from mes_api.db.run_migrations import main as run_alembic


@pytest.fixture
def file_database(tmp_path, monkeypatch):
    path = tmp_path / "mes.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{path}")
    get_settings.cache_clear()
    yield path
    get_settings.cache_clear()


def _tables(path):
    engine = create_engine(f"sqlite:///{path}")
    try:
        return set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


def test_upgrade_creates_every_mapped_table(file_database):
    run_alembic(["upgrade", "head"])
    tables = _tables(file_database)
    assert set(Base.metadata.tables) <= tables
    assert "alembic_version" in tables


def test_downgrade_to_base_drops_the_schema(file_database):
    run_alembic(["upgrade", "head"])
    run_alembic(["downgrade", "base"])
    assert _tables(file_database) <= {"alembic_version"}
