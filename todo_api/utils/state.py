from typing import TypedDict

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from todo_api.core.utils.config import Settings
from todo_api.types.sqlalchemy import SessionLocalType


class LifespanState(TypedDict):
    """
    Objects created once by the lifespan and shared by all requests.

    Requests never use the engine directly: `get_db` opens a session per request with `SessionLocal`.
    """

    engine: AsyncEngine
    SessionLocal: SessionLocalType


class RuntimeLifespanState(LifespanState):
    """The state seen by a request, where the logging middleware adds the request identifier"""

    request_id: str


def init_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(
        settings.SQLALCHEMY_DATABASE_URL,
        echo=settings.DATABASE_DEBUG,
    )


def init_SessionLocal(engine: AsyncEngine) -> SessionLocalType:
    # Objects stay readable after the commit, once the endpoint returned
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def disconnect_engine(engine: AsyncEngine) -> None:
    await engine.dispose()
