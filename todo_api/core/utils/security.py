"""
Passwords and session tokens.

Passwords are hashed with bcrypt, which salts each hash and stores the salt and the cost factor in it:
https://en.wikipedia.org/wiki/Bcrypt
Session tokens are opaque random strings, stored in the `core_user_token` table and sent in the `x-auth` header.
"""

import secrets

import bcrypt
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.core.users import cruds_users, models_users

AUTH_TOKEN_HEADER = "x-auth"
# Kind of the tokens issued by signup and login
AUTH_TOKEN_ACCESS = "auth"

# Without `auto_error`, a missing header gives `None` and we answer an empty 401 instead of FastAPI's 403
auth_token_header = APIKeyHeader(
    name=AUTH_TOKEN_HEADER,
    scheme_name="SessionTokenAuthentication",
    auto_error=False,
)


def generate_token(nbytes: int = 32) -> str:
    """A urlsafe token made of `nbytes` random bytes, see https://docs.python.org/3/library/secrets.html#secrets.token_urlsafe"""
    return secrets.token_urlsafe(nbytes)


def get_password_hash(password: str, rounds: int = 13) -> str:
    return bcrypt.hashpw(
        password.encode("utf-8"),
        bcrypt.gensalt(rounds=rounds),
    ).decode("utf-8")


def verify_password(
    plain_password: str,
    hashed_password: str | None,
    rounds: int = 13,
) -> bool:
    """
    Check `plain_password` against `hashed_password`.

    Without a hash, a random one is checked anyway so that an unknown email takes as long to reject
    as a wrong password. Response times do not reveal which emails have an account.
    """
    if hashed_password is None:
        bcrypt.checkpw(
            plain_password.encode("utf-8"),
            get_password_hash(generate_token(12), rounds=rounds).encode("utf-8"),
        )
        return False
    return bcrypt.checkpw(
        plain_password.encode("utf-8"),
        hashed_password.encode("utf-8"),
    )


async def authenticate_user(
    db: AsyncSession,
    email: str,
    password: str,
    rounds: int = 13,
) -> models_users.CoreUser | None:
    """
    The user with this email and password, or `None` for an unknown email as for a wrong password
    """
    user = await cruds_users.get_user_by_email(db=db, email=email)
    hashed_password = user.password_hash if user is not None else None
    if not verify_password(password, hashed_password, rounds=rounds):
        return None
    return user
