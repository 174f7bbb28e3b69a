from datetime import datetime

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from todo_api.types.sqlalchemy import Base


class CoreUser(Base):
    __tablename__ = "core_user"

    id: Mapped[str] = mapped_column(primary_key=True, index=True)
    email: Mapped[str] = mapped_column(unique=True, index=True)
    password_hash: Mapped[str]
    created_on: Mapped[datetime]


class CoreUserToken(Base):
    """
    A session token of a user. A user may have multiple concurrent sessions:
    each login appends a token and each logout removes the token used for the request.
    """

    __tablename__ = "core_user_token"

    # The autoincremented key gives the issuance order of the tokens
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True, init=False)
    user_id: Mapped[str] = mapped_column(ForeignKey("core_user.id"), index=True)
    access: Mapped[str]
    token: Mapped[str] = mapped_column(index=True)
    created_on: Mapped[datetime]
