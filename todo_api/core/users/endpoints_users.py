import logging
import uuid
from datetime import UTC, datetime

from fastapi import Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.core.users import cruds_users, models_users, schemas_users
from todo_api.core.utils import security
from todo_api.core.utils.config import Settings
from todo_api.dependencies import (
    get_auth_token,
    get_db,
    get_request_id,
    get_settings,
    is_user,
)
from todo_api.types.exceptions import (
    InvalidCredentialsError,
    PasswordTooShortError,
    UserWithEmailAlreadyExistError,
)
from todo_api.types.module import Module

core_module = Module(tag="Users")

todo_api_security_logger = logging.getLogger("todo_api.security")


async def issue_auth_token(
    user: models_users.CoreUser,
    response: Response,
    db: AsyncSession,
    settings: Settings,
) -> str:
    """
    Append a new session token to the user token sequence and send it in the response header.
    """
    token = security.generate_token(settings.AUTH_TOKEN_NBYTES)
    await cruds_users.add_token(
        db=db,
        user_token=models_users.CoreUserToken(
            user_id=user.id,
            access=security.AUTH_TOKEN_ACCESS,
            token=token,
            created_on=datetime.now(UTC),
        ),
    )
    response.headers[security.AUTH_TOKEN_HEADER] = token
    return token


@core_module.router.post(
    "/users",
    response_model=schemas_users.CoreUserPublic,
    status_code=200,
)
async def create_user(
    user_create: schemas_users.CoreUserCreateRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    request_id: str = Depends(get_request_id),
):
    """
    Create an account. The user is logged in: a session token is returned in the `x-auth` header.

    The email must be a valid address not used by another account and the password must be long enough.
    """
    if len(user_create.password) < settings.PASSWORD_MIN_LENGTH:
        raise PasswordTooShortError(settings.PASSWORD_MIN_LENGTH)

    db_user = await cruds_users.get_user_by_email(db=db, email=user_create.email)
    if db_user is not None:
        todo_api_security_logger.warning(
            f"Signup: {user_create.email} is already used by an account ({request_id})",
        )
        raise UserWithEmailAlreadyExistError(user_create.email)

    user = await cruds_users.create_user(
        db=db,
        user=models_users.CoreUser(
            id=str(uuid.uuid4()),
            email=user_create.email,
            password_hash=security.get_password_hash(
                user_create.password,
                rounds=settings.BCRYPT_ROUNDS,
            ),
            created_on=datetime.now(UTC),
        ),
    )
    await issue_auth_token(user=user, response=response, db=db, settings=settings)

    todo_api_security_logger.info(
        f"Signup: account {user.id} created ({request_id})",
    )

    return user


@core_module.router.get(
    "/users/me",
    response_model=schemas_users.CoreUserPublic,
    status_code=200,
)
async def read_current_user(
    user: models_users.CoreUser = Depends(is_user),
):
    """
    Return the public representation of current user

    **The user must be authenticated to use this endpoint**
    """

    return user


@core_module.router.post(
    "/users/login",
    response_model=schemas_users.CoreUserPublic,
    status_code=200,
)
async def login(
    login_request: schemas_users.CoreUserLoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    request_id: str = Depends(get_request_id),
):
    """
    Log in with an email and a password. A new session token is returned in the `x-auth` header,
    previous sessions stay valid.

    An unknown email and a wrong password produce the same error.
    """
    user = await security.authenticate_user(
        db=db,
        email=login_request.email,
        password=login_request.password,
        rounds=settings.BCRYPT_ROUNDS,
    )
    if user is None:
        todo_api_security_logger.warning(
            f"Login: invalid credentials for {login_request.email} ({request_id})",
        )
        raise InvalidCredentialsError

    await issue_auth_token(user=user, response=response, db=db, settings=settings)

    todo_api_security_logger.info(
        f"Login: user {user.id} logged in ({request_id})",
    )

    return user


@core_module.router.delete(
    "/users/me/token",
    status_code=200,
    response_class=Response,
)
async def logout(
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user),
    token: str = Depends(get_auth_token),
    request_id: str = Depends(get_request_id),
):
    """
    Log out the current session: the token used for this request is revoked.

    Other sessions of the user are kept.

    **The user must be authenticated to use this endpoint**
    """
    await cruds_users.delete_token(db=db, user_id=user.id, token=token)

    todo_api_security_logger.info(
        f"Logout: user {user.id} revoked a session token ({request_id})",
    )

    return Response(status_code=200)
