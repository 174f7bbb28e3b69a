"""Synchronous database helpers, used by `init_db` before the event loop serves requests"""

from sqlalchemy import Connection, Engine, MetaData, create_engine

from todo_api.core.utils.config import Settings


def get_sync_db_engine(settings: Settings) -> Engine:
    return create_engine(
        settings.SQLALCHEMY_DATABASE_URL_SYNC,
        echo=settings.DATABASE_DEBUG,
    )


def drop_db_sync(conn: Connection) -> None:
    """
    Drop every table of the database, whether a model declares it or not.

    The `alembic_version` table is dropped too, otherwise the next startup would consider the empty database up to date.
    """
    reflected_tables = MetaData()
    reflected_tables.reflect(bind=conn)
    reflected_tables.drop_all(bind=conn)
