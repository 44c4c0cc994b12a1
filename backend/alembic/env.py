"""Alembic environment: one metadata, synchronous driver.

Usage:
  alembic upgrade head
  alembic revision --autogenerate -m "..."

The URL comes from DATABASE_URL_SYNC. SQLite URLs are migrated in batch
mode so ALTER TABLE works there as well.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from onboard.config import settings
from onboard.database import Base
# Register every table on Base.metadata
from onboard.models import *  # noqa: F401,F403

config = context.config
config.set_main_option("sqlalchemy.url", settings.database_url_sync)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
url = config.get_main_option("sqlalchemy.url")

CONFIGURE_KWARGS = {
    "target_metadata": target_metadata,
    "compare_type": True,
    "render_as_batch": url.startswith("sqlite"),
}


def run_migrations_offline() -> None:
    context.configure(url=url, literal_binds=True, **CONFIGURE_KWARGS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        context.configure(connection=connection, **CONFIGURE_KWARGS)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
