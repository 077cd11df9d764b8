"""Alembic environment for the docportal schema.

Migrates the tenants, documents, analysis versions, status events and
document_embeddings tables described by docportal.models. The database URL
is taken from docportal.core.config.settings (DATABASE_URL); alembic.ini
carries no connection string.
"""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from docportal.core.config import settings
from docportal.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# ConfigParser interpolation treats "%" specially
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL.replace("%", "%%"))

target_metadata = Base.metadata

_configure_opts = {
    "target_metadata": target_metadata,
    "compare_type": True,
    # SQLite cannot ALTER most constraints in place
    "render_as_batch": settings.DATABASE_URL.startswith("sqlite"),
}


def run_migrations_offline() -> None:
    """Emit SQL for the docportal schema without connecting."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_opts,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        context.configure(connection=connection, **_configure_opts)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
