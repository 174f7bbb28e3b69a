import uuid
from datetime import UTC, datetime

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.core.users import models_users
from todo_api.dependencies import get_db, is_user
from todo_api.modules.todos import cruds_todos, models_todos, schemas_todos
from todo_api.types.module import Module
from todo_api.utils.tools import is_valid_uuid

module = Module(tag="Todos")


async def get_owned_todo_or_404(
    todo_id: str,
    db: AsyncSession,
    user: models_users.CoreUser,
) -> models_todos.Todo:
    """
    Return the todo `todo_id` owned by `user`.

    A malformed identifier, a todo owned by another user and a missing todo all result in the same 404 error.
    """
    if not is_valid_uuid(todo_id):
        raise HTTPException(status_code=404, detail="Todo not found")

    todo = await cruds_todos.get_todo_by_id(
        db=db,
        todo_id=uuid.UUID(todo_id),
        owner_id=user.id,
    )
    if todo is None:
        raise HTTPException(status_code=404, detail="Todo not found")
    return todo


@module.router.post(
    "/todos",
    response_model=schemas_todos.Todo,
    status_code=200,
)
async def create_todo(
    todo_create: schemas_todos.TodoBase,
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user),
):
    """
    Create a todo, owned by the current user. The todo is not completed.

    **The user must be authenticated to use this endpoint**
    """

    return await cruds_todos.create_todo(
        db=db,
        todo=models_todos.Todo(
            id=uuid.uuid4(),
            text=todo_create.text,
            completed=False,
            completed_at=None,
            owner_id=user.id,
        ),
    )


@module.router.get(
    "/todos",
    response_model=schemas_todos.TodoList,
    status_code=200,
)
async def get_todos(
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user),
):
    """
    Return all the todos of the current user

    **The user must be authenticated to use this endpoint**
    """

    todos = await cruds_todos.get_todos_by_owner_id(db=db, owner_id=user.id)
    return schemas_todos.TodoList(
        todos=[schemas_todos.Todo.model_validate(todo) for todo in todos],
    )


@module.router.get(
    "/todos/{todo_id}",
    response_model=schemas_todos.TodoReturn,
    status_code=200,
)
async def get_todo(
    todo_id: str,
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user),
):
    """
    Return a todo of the current user

    **The user must be authenticated to use this endpoint**
    """

    todo = await get_owned_todo_or_404(todo_id=todo_id, db=db, user=user)
    return schemas_todos.TodoReturn(todo=schemas_todos.Todo.model_validate(todo))


@module.router.delete(
    "/todos/{todo_id}",
    response_model=schemas_todos.TodoReturn,
    status_code=200,
)
async def delete_todo(
    todo_id: str,
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user),
):
    """
    Delete a todo of the current user. The deleted todo is returned.

    **The user must be authenticated to use this endpoint**
    """

    todo = await get_owned_todo_or_404(todo_id=todo_id, db=db, user=user)
    # The todo must be serialized before being removed from the session
    deleted_todo = schemas_todos.Todo.model_validate(todo)

    await cruds_todos.delete_todo(db=db, todo_id=todo.id, owner_id=user.id)

    return schemas_todos.TodoReturn(todo=deleted_todo)


@module.router.patch(
    "/todos/{todo_id}",
    response_model=schemas_todos.TodoReturn,
    status_code=200,
)
async def update_todo(
    todo_id: str,
    todo_update: schemas_todos.TodoEdit,
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user),
):
    """
    Update the text and the completion state of a todo.

    Sending `completed: true` marks the todo as completed now. Any other value, or no value at all,
    marks it as not completed.

    **The user must be authenticated to use this endpoint**
    """

    todo = await get_owned_todo_or_404(todo_id=todo_id, db=db, user=user)

    if todo_update.completed is True:
        completed = True
        completed_at = datetime.now(UTC)
    else:
        completed = False
        completed_at = None

    await cruds_todos.update_todo(
        db=db,
        todo_id=todo.id,
        owner_id=user.id,
        completed=completed,
        completed_at=completed_at,
        text=todo_update.text,
    )
    # The update statement synchronizes the todo already loaded in the session
    return schemas_todos.TodoReturn(todo=schemas_todos.Todo.model_validate(todo))
