import uuid
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.modules.todos import models_todos
from todo_api.types.exceptions import StorageError


async def get_todos_by_owner_id(
    db: AsyncSession,
    owner_id: str,
) -> Sequence[models_todos.Todo]:
    result = await db.execute(
        select(models_todos.Todo).where(
            models_todos.Todo.owner_id == owner_id,
        ),
    )
    return result.scalars().all()


async def get_todo_by_id(
    db: AsyncSession,
    todo_id: uuid.UUID,
    owner_id: str,
) -> models_todos.Todo | None:
    """
    Return the todo with id `todo_id` if it belongs to `owner_id`.

    A todo owned by another user is not returned.
    """
    result = await db.execute(
        select(models_todos.Todo).where(
            models_todos.Todo.id == todo_id,
            models_todos.Todo.owner_id == owner_id,
        ),
    )
    return result.scalars().first()


async def create_todo(
    db: AsyncSession,
    todo: models_todos.Todo,
) -> models_todos.Todo:
    db.add(todo)
    try:
        await db.flush()
    except SQLAlchemyError as error:
        raise StorageError from error
    return todo


async def update_todo(
    db: AsyncSession,
    todo_id: uuid.UUID,
    owner_id: str,
    completed: bool,
    completed_at: datetime | None,
    text: str | None = None,
) -> None:
    """
    Update the completion state of a todo, and its text if provided.

    `completed` and `completed_at` are always written together.
    """
    values: dict = {"completed": completed, "completed_at": completed_at}
    if text is not None:
        values["text"] = text

    try:
        await db.execute(
            update(models_todos.Todo)
            .where(
                models_todos.Todo.id == todo_id,
                models_todos.Todo.owner_id == owner_id,
            )
            .values(**values),
        )
    except SQLAlchemyError as error:
        raise StorageError from error


async def delete_todo(
    db: AsyncSession,
    todo_id: uuid.UUID,
    owner_id: str,
) -> None:
    try:
        await db.execute(
            delete(models_todos.Todo).where(
                models_todos.Todo.id == todo_id,
                models_todos.Todo.owner_id == owner_id,
            ),
        )
    except SQLAlchemyError as error:
        raise StorageError from error
