"""
Alembic environment.

At startup, `todo_api.app.init_db` runs alembic on its own synchronous connection, given in `config.attributes["connection"]`.
From the command line (`alembic upgrade head`, `alembic revision --autogenerate`), an engine is created from the production settings.
"""

import asyncio
import importlib
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy.engine import Connection

from todo_api.core.utils.config import construct_prod_settings
from todo_api.types.sqlalchemy import Base
from todo_api.utils.state import init_engine

config = context.config

# Loggers configured by the application are kept
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# Every model must be imported to be part of the metadata compared by `--autogenerate`
for models_file in sorted(Path("todo_api").glob("**/models_*.py")):
    importlib.import_module(".".join(models_file.with_suffix("").parts))

target_metadata = Base.metadata


def run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        # Revisions reference `TZDateTime` by its name, and import it themselves
        user_module_prefix="",
        # SQLite can only alter tables through batch operations
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_from_cli() -> None:
    engine = init_engine(construct_prod_settings())
    async with engine.connect() as connection:
        # Alembic inspects the database synchronously
        await connection.run_sync(run_migrations)
    await engine.dispose()


if context.is_offline_mode():
    context.configure(
        url=construct_prod_settings().SQLALCHEMY_DATABASE_URL_SYNC,
        target_metadata=target_metadata,
        literal_binds=True,
    )
    with context.begin_transaction():
        context.run_migrations()
else:
    shared_connection: Connection | None = config.attributes.get("connection")
    if shared_connection is None:
        asyncio.run(run_migrations_from_cli())
    else:
        run_migrations(shared_connection)
