"""
FastAPI [dependencies](https://fastapi.tiangolo.com/tutorial/dependencies/) shared by the endpoints.

```python
async def get_todos(
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user),
):
```
"""

import logging
from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated, cast

from fastapi import Depends, FastAPI, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import State

from todo_api.core.users import cruds_users, models_users
from todo_api.core.utils import security
from todo_api.core.utils.config import Settings, construct_prod_settings
from todo_api.types.exceptions import InvalidAppStateTypeError, UnauthorizedError
from todo_api.utils.state import (
    LifespanState,
    RuntimeLifespanState,
    disconnect_engine,
    init_engine,
    init_SessionLocal,
)

todo_api_access_logger = logging.getLogger("todo_api.access")
todo_api_security_logger = logging.getLogger("todo_api.security")


async def init_app_state(
    app: FastAPI,
    settings: Settings,
    todo_api_error_logger: logging.Logger,
) -> LifespanState:
    """
    Create the database engine and the session maker, at the start of the lifespan.

    The lifespan calls `app.dependency_overrides.get(init_app_state, init_app_state)`, so that tests can provide their own engine.
    """
    engine = init_engine(settings=settings)
    todo_api_error_logger.info("Startup: Database engine initialized")

    return LifespanState(
        engine=engine,
        SessionLocal=init_SessionLocal(engine),
    )


async def disconnect_state(
    state: LifespanState,
    todo_api_error_logger: logging.Logger,
) -> None:
    await disconnect_engine(state["engine"])
    todo_api_error_logger.info("Database engine disposed")


def get_app_state(request: Request) -> RuntimeLifespanState:
    """
    The lifespan state, completed with the `request_id` set by the logging middleware.
    """
    if not isinstance(request.state, State):
        raise InvalidAppStateTypeError
    return cast("RuntimeLifespanState", request.state._state)


AppState = Annotated[RuntimeLifespanState, Depends(get_app_state)]


async def get_request_id(state: AppState) -> str:
    """
    Identifier of the request, to be included in log records
    """
    return state["request_id"]


@lru_cache
def get_settings() -> Settings:
    """
    Production settings, built once. See https://fastapi.tiangolo.com/advanced/settings/#lru_cache-technical-details
    """
    return construct_prod_settings()


async def get_db(state: AppState) -> AsyncGenerator[AsyncSession, None]:
    """
    A database session, committed when the request succeeds and rolled back on unexpected errors.

    An `HTTPException` is an expected outcome handled by the endpoint: the session is committed too.
    Cruds only `flush` their changes, they never commit nor rollback.
    """
    async with state["SessionLocal"]() as db:
        try:
            yield db
        except HTTPException:
            await db.commit()
            raise
        except Exception:
            await db.rollback()
            raise
        else:
            await db.commit()


def get_auth_token(
    token: str | None = Depends(security.auth_token_header),
    request_id: str = Depends(get_request_id),
) -> str:
    """
    The session token of the `x-auth` header. It is not checked: use `is_user` to get its user.
    """
    if not token:
        todo_api_access_logger.info(
            f"Missing {security.AUTH_TOKEN_HEADER} header ({request_id})",
        )
        raise UnauthorizedError
    return token


async def is_user(
    db: AsyncSession = Depends(get_db),
    token: str = Depends(get_auth_token),
    request_id: str = Depends(get_request_id),
) -> models_users.CoreUser:
    """
    The user owning the session token of the request.

    A missing or unknown token results in an empty 401 response, the endpoint is never called.
    Dependencies are cached during a request: an endpoint depending on `get_auth_token` gets the token matched here.
    """
    user = await cruds_users.get_user_by_token(
        db=db,
        token=token,
        access=security.AUTH_TOKEN_ACCESS,
    )
    if user is None:
        todo_api_security_logger.warning(
            f"Rejected an unknown session token ({request_id})",
        )
        raise UnauthorizedError
    return user
