from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from todo_api.utils import validators


class TodoBase(BaseModel):
    # An empty text is accepted, only its presence is required
    text: str

    _normalize_text = field_validator("text")(validators.trailing_spaces_remover)


class Todo(TodoBase):
    id: UUID = Field(serialization_alias="_id")
    completed: bool
    completed_at: datetime | None = Field(serialization_alias="completedAt")
    owner_id: str = Field(serialization_alias="_creator")

    model_config = ConfigDict(from_attributes=True)


class TodoEdit(BaseModel):
    """
    Only `text` and `completed` can be edited, other fields of the body are ignored.

    `completed` is not coerced: only the boolean `true` marks the todo as completed.
    Any other value, including `"true"` or `1`, marks it as not completed.
    """

    text: str | None = None
    completed: Any = None

    _normalize_text = field_validator("text")(validators.trailing_spaces_remover)


class TodoReturn(BaseModel):
    todo: Todo


class TodoList(BaseModel):
    todos: list[Todo]
