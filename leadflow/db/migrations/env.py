import importlib
import logging
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

from leadflow.app.config import settings
from leadflow.db.base import Base

# import model modules explicitly so Base.metadata is fully populated
model_modules = [
    "leadflow.models.user",
    "leadflow.models.login_session",
    "leadflow.models.lead",
]

for mod in model_modules:
    try:
        importlib.import_module(mod)
    except Exception:
        logging.exception("Failed to import model module '%s'.", mod)
        raise

# Alembic config
config = context.config

# the database URL always comes from settings
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=settings.IS_SQLITE,
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
            compare_type=True,
            # SQLite cannot ALTER most columns in place
            render_as_batch=settings.IS_SQLITE,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
