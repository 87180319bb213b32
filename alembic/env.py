"""
Alembic Environment for MyBook

The database URL comes from mybook.config (DATABASE_URL), never from
alembic.ini, so migrations always target the same database as the API.

Workflow after changing a model:
    alembic revision --autogenerate -m "describe the change"
    # review alembic/versions/<rev>_*.py
    alembic upgrade head

Generate SQL without connecting:
    alembic upgrade head --sql > migration.sql
"""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

import mybook.models  # noqa: F401  registers every table on Base.metadata
from alembic import context
from mybook.config import get_settings
from mybook.database import Base

config = context.config
config.set_main_option("sqlalchemy.url", get_settings().database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL for the migrations instead of executing them."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply the migrations over a dedicated, unpooled connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            # SQLite needs batch mode for ALTER TABLE in later revisions
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
