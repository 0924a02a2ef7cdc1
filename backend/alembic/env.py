# backend/alembic/env.py
from logging.config import fileConfig
import os, sys
from alembic import context

# backend/ on sys.path so `servicedesk` imports without an install
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

# Same engine and .env resolution as the running service
from servicedesk.core.db import engine, Base
from servicedesk import models  # noqa: F401  (registers every table)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def _options(**kw) -> dict:
    # SQLite cannot ALTER constraints in place; batch mode recreates the table
    return dict(
        target_metadata=Base.metadata,
        compare_type=True,
        compare_server_default=False,
        render_as_batch=engine.dialect.name == "sqlite",
        **kw,
    )


def run_migrations_offline():
    """Emit SQL for the configured DSN without connecting."""
    context.configure(**_options(url=str(engine.url), literal_binds=True))
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    with engine.connect() as connection:
        context.configure(**_options(connection=connection))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
