"""Alembic environment for the audit job and segment result schema.

The target database always comes from `DATABASE_URL` (or `.env`), never from
`alembic.ini`, so migrations and the service share one connection setting.
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from audit_pipeline.config import config_load_database_url

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

config.set_main_option("sqlalchemy.url", config_load_database_url())

# Migrations are hand-written with `op`; there is no ORM metadata to diff against.
target_metadata = None
_CONFIGURE_OPTIONS = {
    "target_metadata": target_metadata,
    "compare_type": True,
    "transaction_per_migration": True,
}


def run_migrations_offline() -> None:
    """Emit migration SQL to stdout without a live connection."""

    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_CONFIGURE_OPTIONS,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a short-lived, unpooled connection."""

    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    try:
        with connectable.connect() as connection:
            context.configure(connection=connection, **_CONFIGURE_OPTIONS)

            with context.begin_transaction():
                context.run_migrations()
    finally:
        connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
