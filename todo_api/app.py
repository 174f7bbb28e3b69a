"""Assembly of the FastAPI application: database initialization, routers, middlewares and exception handlers"""

import logging
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from alembic import command as alembic_command
from alembic.config import Config as AlembicConfig
from alembic.migration import MigrationContext
from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from todo_api import api
from todo_api.core.utils.config import Settings
from todo_api.core.utils.log import LogConfig
from todo_api.core.utils.security import AUTH_TOKEN_HEADER
from todo_api.dependencies import disconnect_state, init_app_state
from todo_api.types.exceptions import (
    InvalidCredentialsError,
    InvalidUserDataError,
    StorageError,
    UnauthorizedError,
)
from todo_api.types.sqlalchemy import Base
from todo_api.utils import initialization
from todo_api.utils.state import LifespanState

# Loggers are only configured by `get_application`, they are retrieved there

# Storage failures on these methods are reported as a bad request, like validation errors
MUTATING_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def init_db(
    settings: Settings,
    todo_api_error_logger: logging.Logger,
    drop_db: bool = False,
) -> None:
    """
    Create or upgrade the tables, using a synchronous engine.

    An empty database is created from the models then stamped with the latest alembic revision,
    see https://alembic.sqlalchemy.org/en/latest/cookbook.html#building-an-up-to-date-database-from-scratch
    A database which already has a revision is upgraded to `head`.

    With `drop_db`, every table is dropped first. Tests use it to start from an empty database.
    """
    sync_engine = initialization.get_sync_db_engine(settings=settings)

    try:
        with sync_engine.begin() as connection:
            if drop_db:
                initialization.drop_db_sync(connection)

            # `migrations/env.py` runs the alembic commands on this connection
            # See https://alembic.sqlalchemy.org/en/latest/cookbook.html#connection-sharing
            alembic_cfg = AlembicConfig("alembic.ini")
            alembic_cfg.attributes["connection"] = connection

            revision = MigrationContext.configure(connection).get_current_revision()
            if revision is None:
                todo_api_error_logger.info("Startup: Creating the database tables")
                Base.metadata.create_all(connection)
                alembic_command.stamp(alembic_cfg, "head")
            else:
                todo_api_error_logger.info(
                    f"Startup: Upgrading the database from revision {revision}",
                )
                alembic_command.upgrade(alembic_cfg, "head")
    except Exception:
        todo_api_error_logger.exception("Startup: Could not initialize the database")
        raise
    finally:
        sync_engine.dispose()

    todo_api_error_logger.info("Startup: Database is up to date")


def use_route_path_as_operation_ids(app: FastAPI) -> None:
    """
    Name operations after their method and path, like `get_users_me`, so that generated clients get readable function names.

    See https://fastapi.tiangolo.com/advanced/path-operation-advanced-configuration/
    """
    for route in app.routes:
        if isinstance(route, APIRoute):
            methods = "_".join(sorted(route.methods)).lower()
            route.operation_id = methods + route.path.replace("/", "_")


def get_application(settings: Settings, drop_db: bool = False) -> FastAPI:
    """
    Build the application. Settings are given as a parameter so that tests can use their own.
    """
    LogConfig().initialize_loggers(settings=settings)

    todo_api_access_logger = logging.getLogger("todo_api.access")
    todo_api_error_logger = logging.getLogger("todo_api.error")

    # The yielded state is copied in the state of each request, see https://www.starlette.io/lifespan/#lifespan-state
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[LifespanState, None]:
        init_db(
            settings=settings,
            todo_api_error_logger=todo_api_error_logger,
            drop_db=drop_db,
        )

        # Tests override `init_app_state` to use their own database engine
        state: LifespanState = await app.dependency_overrides.get(
            init_app_state,
            init_app_state,
        )(
            app=app,
            settings=settings,
            todo_api_error_logger=todo_api_error_logger,
        )

        yield state

        todo_api_error_logger.info("Shutting down")
        await disconnect_state(
            state=state,
            todo_api_error_logger=todo_api_error_logger,
        )

    app = FastAPI(
        title="Todo API",
        version=settings.API_VERSION,
        lifespan=lifespan,
    )
    app.include_router(api.api_router)
    use_route_path_as_operation_ids(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        # Browsers only let clients read the session token header if it is exposed
        expose_headers=[AUTH_TOKEN_HEADER],
    )

    @app.middleware("http")
    async def logging_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """
        Give each request an identifier, to be included in every record logged while handling it, and log the response status.
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        client = request.client
        client_address = f"{client.host}:{client.port}" if client else "unknown"

        response = await call_next(request)

        todo_api_access_logger.info(
            f'{client_address} - "{request.method} {request.url.path}" {response.status_code} ({request_id})',
        )
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        # The body may contain a password: validation errors are only logged in debug mode
        todo_api_error_logger.debug(
            f"Validation error: {exc.errors()} ({request.state.request_id})",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=jsonable_encoder({"detail": exc.errors()}),
        )

    @app.exception_handler(InvalidUserDataError)
    @app.exception_handler(InvalidCredentialsError)
    async def bad_request_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc)},
        )

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_exception_handler(
        request: Request,
        exc: UnauthorizedError,
    ) -> Response:
        return Response(status_code=status.HTTP_401_UNAUTHORIZED)

    @app.exception_handler(StorageError)
    async def storage_exception_handler(
        request: Request,
        exc: StorageError,
    ) -> JSONResponse:
        todo_api_error_logger.error(
            f"Storage error on {request.method} {request.url.path}: {exc.__cause__} ({request.state.request_id})",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST
            if request.method in MUTATING_METHODS
            else status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": str(exc)},
        )

    return app
