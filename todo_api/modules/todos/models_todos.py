from datetime import datetime

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from todo_api.types.sqlalchemy import Base, PrimaryKey


class Todo(Base):
    __tablename__ = "todo"

    id: Mapped[PrimaryKey]
    text: Mapped[str]
    completed: Mapped[bool]
    # Only set when `completed` is True, at the moment the todo was marked as completed
    completed_at: Mapped[datetime | None]
    # The owner is set at creation and never changes. Every query is scoped to it.
    owner_id: Mapped[str] = mapped_column(ForeignKey("core_user.id"), index=True)
