# src/Loreweaver/migrate.py
"""Apply the Alembic revisions shipped in ``Loreweaver/migrations/``.

The revisions live inside the package so installed copies can migrate too.
The desktop shell calls :func:`run_migrations` once at startup, before the
first command is served.
"""

from __future__ import annotations

from pathlib import Path

import structlog
from alembic import command
from alembic.config import Config

from Loreweaver import db

log = structlog.get_logger()

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def alembic_config(url: str | None = None) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    # ConfigParser interpolation: a literal % must be doubled
    cfg.set_main_option("sqlalchemy.url", (url or db.DATABASE_URL).replace("%", "%%"))
    return cfg


def run_migrations(url: str | None = None, revision: str = "head") -> None:
    log.info("db.migrations.upgrade", revision=revision)
    command.upgrade(alembic_config(url), revision)


def rollback_migrations(url: str | None = None, revision: str = "base") -> None:
    log.info("db.migrations.downgrade", revision=revision)
    command.downgrade(alembic_config(url), revision)
