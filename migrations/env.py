import os
import sys
from logging.config import fileConfig

from sqlalchemy import engine_from_config
from sqlalchemy import pool

from alembic import context

config = context.config

# alembic.ini sits at the project root; find it even when alembic runs elsewhere.
if config.config_file_name is not None:
    ini_path = config.config_file_name
    if not os.path.isabs(ini_path) and not os.path.exists(ini_path):
        root_ini = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "alembic.ini"))
        if os.path.exists(root_ini):
            ini_path = root_ini
    fileConfig(ini_path)

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from app.extensions import db  # noqa: E402
import app.models  # noqa: F401,E402  (registers the client table)

target_metadata = db.metadata


def _get_migration_db_url(section: dict | None = None) -> str:
    """DATABASE_URL first (what the app reads), then sqlalchemy.url from alembic.ini."""
    section = section or {}
    url = (
        os.environ.get("DATABASE_URL")
        or section.get("sqlalchemy.url")
        or config.get_main_option("sqlalchemy.url")
    )
    if not url:
        raise RuntimeError("DATABASE_URL (or sqlalchemy.url) is not set for Alembic migrations")
    return url


def run_migrations_offline() -> None:
    context.configure(
        url=_get_migration_db_url(),
        target_metadata=target_metadata,
        compare_type=True,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section, {}) or {}
    section["sqlalchemy.url"] = _get_migration_db_url(section)

    engine = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with engine.connect() as connection:
        # SQLite needs batch mode for ALTER TABLE
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
