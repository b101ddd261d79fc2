"""
The Alembic history builds the same schema the models declare.
"""
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy import create_engine, inspect

from configs import db
from db import models  # noqa: F401

ROOT = Path(__file__).resolve().parent.parent


def test_upgrade_creates_every_model_table(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    cfg = AlembicConfig(str(ROOT / "alembic.ini"))

    command.upgrade(cfg, "head")

    insp = inspect(create_engine(url))
    assert set(db.metadata.tables) <= set(insp.get_table_names())
    for name, table in db.metadata.tables.items():
        migrated = {c["name"] for c in insp.get_columns(name)}
        assert migrated == {c.name for c in table.columns}, name

    command.downgrade(cfg, "base")
    assert set(inspect(create_engine(url)).get_table_names()) <= {"alembic_version"}
