"""Alembic environment: runs migrations synchronously against settings.DATABASE_URL."""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import make_url

from alembic import context

from app.config import settings
from app.db.base import Base

# Register every table on Base.metadata
from app.models import application, education, job, notification, user  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# asyncpg spells TLS options differently from psycopg2
_SSL_TO_SSLMODE = {"false": "disable", "disable": "disable", "true": "require", "require": "require"}


def sync_database_url(database_url: str) -> str:
    """Swap the async driver of the app URL for its blocking counterpart."""
    url = make_url(database_url)
    if url.drivername == "postgresql+asyncpg":
        query = dict(url.query)
        ssl = query.pop("ssl", None)
        if ssl is not None:
            query["sslmode"] = _SSL_TO_SSLMODE.get(str(ssl).lower(), "prefer")
        url = url.set(drivername="postgresql+psycopg2", query=query)
    elif url.drivername == "sqlite+aiosqlite":
        url = url.set(drivername="sqlite")
    return url.render_as_string(hide_password=False)


config.set_main_option("sqlalchemy.url", sync_database_url(settings.DATABASE_URL).replace("%", "%%"))


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
