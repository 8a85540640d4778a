from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from core.config import get_settings
from core.models import Base


def test_required_tables_present_in_migration():
    text = Path("alembic/versions/20261019_0001_plan_documents.py").read_text()
    for table in ("plan_week_documents", "plan_documents"):
        assert f'"{table}"' in text


def test_migrations_avoid_postgres_now_function_for_portability():
    migrations_dir = Path("alembic/versions")
    for migration_file in migrations_dir.glob("*.py"):
        text = migration_file.read_text(encoding="utf-8").lower()
        assert "now()" not in text, f"Non-portable now() found in {migration_file.name}"


def test_alembic_upgrade_head_succeeds_on_sqlite(tmp_path, monkeypatch):
    db_path = tmp_path / "migration_smoke.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path}")
    get_settings.cache_clear()
    try:
        command.upgrade(Config("alembic.ini"), "head")
    finally:
        get_settings.cache_clear()

    engine = create_engine(f"sqlite:///{db_path}")
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names())
        for name, table in Base.metadata.tables.items():
            assert name in tables
            assert {c["name"] for c in inspector.get_columns(name)} == {c.name for c in table.columns}
    finally:
        engine.dispose()
