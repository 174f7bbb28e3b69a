"""Queries on the accounts and their session tokens. Changes are flushed, `get_db` commits them."""

from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.core.users import models_users
from todo_api.types.exceptions import StorageError, UserWithEmailAlreadyExistError


async def get_user_by_email(
    db: AsyncSession,
    email: str,
) -> models_users.CoreUser | None:
    """Return user with email from database"""

    result = await db.execute(
        select(models_users.CoreUser).where(models_users.CoreUser.email == email),
    )
    return result.scalars().first()


async def get_user_by_token(
    db: AsyncSession,
    token: str,
    access: str,
) -> models_users.CoreUser | None:
    """Return the user whose token sequence contains a `token` of kind `access`"""

    result = await db.execute(
        select(models_users.CoreUser)
        .join(models_users.CoreUserToken)
        .where(
            models_users.CoreUserToken.token == token,
            models_users.CoreUserToken.access == access,
        ),
    )
    return result.scalars().first()


async def create_user(
    db: AsyncSession,
    user: models_users.CoreUser,
) -> models_users.CoreUser:
    """
    Create a new user in database.

    The email uniqueness is enforced by the database: an `IntegrityError` means another user
    with the same email was created concurrently.
    """

    db.add(user)
    try:
        await db.flush()
    except IntegrityError as error:
        raise UserWithEmailAlreadyExistError(user.email) from error
    except SQLAlchemyError as error:
        raise StorageError from error
    return user


async def get_tokens_by_user_id(
    db: AsyncSession,
    user_id: str,
) -> Sequence[models_users.CoreUserToken]:
    """Return the token sequence of the user, in issuance order"""

    result = await db.execute(
        select(models_users.CoreUserToken)
        .where(models_users.CoreUserToken.user_id == user_id)
        .order_by(models_users.CoreUserToken.id),
    )
    return result.scalars().all()


async def add_token(
    db: AsyncSession,
    user_token: models_users.CoreUserToken,
) -> models_users.CoreUserToken:
    """Append a token to the user token sequence"""

    db.add(user_token)
    try:
        await db.flush()
    except SQLAlchemyError as error:
        raise StorageError from error
    return user_token


async def delete_token(
    db: AsyncSession,
    user_id: str,
    token: str,
) -> None:
    """
    Remove `token` from the user token sequence.

    Other tokens of the user, corresponding to other sessions, are kept.
    """

    try:
        await db.execute(
            delete(models_users.CoreUserToken).where(
                models_users.CoreUserToken.user_id == user_id,
                models_users.CoreUserToken.token == token,
            ),
        )
    except SQLAlchemyError as error:
        raise StorageError from error
