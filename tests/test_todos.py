import uuid
from datetime import UTC, datetime

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from pytest_mock import MockerFixture

from todo_api.core.users import models_users
from todo_api.modules.todos import models_todos
from todo_api.types.exceptions import StorageError
from tests.commons import (
    add_object_to_db,
    create_auth_token,
    create_user,
)

user: models_users.CoreUser
other_user: models_users.CoreUser

token_user: str
token_other_user: str

todo: models_todos.Todo
completed_todo: models_todos.Todo
second_completed_todo: models_todos.Todo
other_user_todo: models_todos.Todo


@pytest_asyncio.fixture(scope="module", autouse=True)
async def init_objects() -> None:
    global user, other_user, token_user, token_other_user

    user = await create_user()
    other_user = await create_user()

    token_user = await create_auth_token(user)
    token_other_user = await create_auth_token(other_user)

    global todo, completed_todo, second_completed_todo, other_user_todo

    todo = models_todos.Todo(
        id=uuid.uuid4(),
        text="First test todo",
        completed=False,
        completed_at=None,
        owner_id=user.id,
    )
    await add_object_to_db(todo)

    completed_todo = models_todos.Todo(
        id=uuid.uuid4(),
        text="Second test todo",
        completed=True,
        completed_at=datetime(2024, 1, 1, 12, 0, tzinfo=UTC),
        owner_id=user.id,
    )
    await add_object_to_db(completed_todo)

    second_completed_todo = models_todos.Todo(
        id=uuid.uuid4(),
        text="Third test todo",
        completed=True,
        completed_at=datetime(2024, 2, 1, 8, 30, tzinfo=UTC),
        owner_id=user.id,
    )
    await add_object_to_db(second_completed_todo)

    other_user_todo = models_todos.Todo(
        id=uuid.uuid4(),
        text="Todo of another user",
        completed=False,
        completed_at=None,
        owner_id=other_user.id,
    )
    await add_object_to_db(other_user_todo)


def test_create_todo(client: TestClient) -> None:
    response = client.post(
        "/todos",
        json={"text": "  Buy milk  "},
        headers={"x-auth": token_user},
    )
    assert response.status_code == 200
    json = response.json()
    assert json["text"] == "Buy milk"
    assert json["completed"] is False
    assert json["completedAt"] is None
    assert json["_creator"] == user.id
    assert uuid.UUID(json["_id"])

    response = client.get(
        f"/todos/{json['_id']}",
        headers={"x-auth": token_user},
    )
    assert response.status_code == 200
    assert response.json()["todo"]["text"] == "Buy milk"


def test_create_todo_ignores_other_fields(client: TestClient) -> None:
    response = client.post(
        "/todos",
        json={
            "text": "Walk the dog",
            "completed": True,
            "completedAt": 123,
            "_creator": other_user.id,
        },
        headers={"x-auth": token_user},
    )
    assert response.status_code == 200
    json = response.json()
    assert json["completed"] is False
    assert json["completedAt"] is None
    assert json["_creator"] == user.id


def test_create_todo_with_empty_text(client: TestClient) -> None:
    response = client.post(
        "/todos",
        json={"text": ""},
        headers={"x-auth": token_user},
    )
    assert response.status_code == 200
    assert response.json()["text"] == ""


def test_create_todo_without_text(client: TestClient) -> None:
    response = client.post(
        "/todos",
        json={},
        headers={"x-auth": token_user},
    )
    assert response.status_code == 400


def test_create_todo_without_token(client: TestClient) -> None:
    response = client.post(
        "/todos",
        json={"text": "Unauthenticated todo"},
    )
    assert response.status_code == 401
    assert response.content == b""


def test_create_todo_with_storage_error(
    mocker: MockerFixture,
    client: TestClient,
) -> None:
    mocker.patch(
        "todo_api.modules.todos.cruds_todos.create_todo",
        side_effect=StorageError(),
    )
    response = client.post(
        "/todos",
        json={"text": "Never saved"},
        headers={"x-auth": token_user},
    )
    assert response.status_code == 400


def test_get_todos(client: TestClient) -> None:
    response = client.get(
        "/todos",
        headers={"x-auth": token_user},
    )
    assert response.status_code == 200
    todos = response.json()["todos"]
    todo_ids = [todo_item["_id"] for todo_item in todos]
    assert str(todo.id) in todo_ids
    assert str(completed_todo.id) in todo_ids
    # Todos of other users are never listed
    assert str(other_user_todo.id) not in todo_ids
    assert all(todo_item["_creator"] == user.id for todo_item in todos)


def test_get_todos_with_storage_error(
    mocker: MockerFixture,
    client: TestClient,
) -> None:
    mocker.patch(
        "todo_api.modules.todos.cruds_todos.get_todos_by_owner_id",
        side_effect=StorageError(),
    )
    response = client.get(
        "/todos",
        headers={"x-auth": token_user},
    )
    assert response.status_code == 500


def test_get_todos_with_unknown_token(client: TestClient) -> None:
    response = client.get(
        "/todos",
        headers={"x-auth": "unknown-token"},
    )
    assert response.status_code == 401
    assert response.content == b""


def test_get_todo(client: TestClient) -> None:
    response = client.get(
        f"/todos/{completed_todo.id}",
        headers={"x-auth": token_user},
    )
    assert response.status_code == 200
    json = response.json()["todo"]
    assert json["_id"] == str(completed_todo.id)
    assert json["text"] == "Second test todo"
    assert json["completed"] is True
    assert json["completedAt"] is not None


def test_get_todo_of_another_user(client: TestClient) -> None:
    response = client.get(
        f"/todos/{other_user_todo.id}",
        headers={"x-auth": token_user},
    )
    assert response.status_code == 404


def test_get_unknown_todo(client: TestClient) -> None:
    response = client.get(
        f"/todos/{uuid.uuid4()}",
        headers={"x-auth": token_user},
    )
    assert response.status_code == 404


def test_update_todo_of_another_user(client: TestClient) -> None:
    response = client.patch(
        f"/todos/{other_user_todo.id}",
        json={"text": "Stolen todo", "completed": True},
        headers={"x-auth": token_user},
    )
    assert response.status_code == 404

    response = client.get(
        f"/todos/{other_user_todo.id}",
        headers={"x-auth": token_other_user},
    )
    assert response.status_code == 200
    json = response.json()["todo"]
    assert json["text"] == "Todo of another user"
    assert json["completed"] is False


def test_complete_todo(client: TestClient) -> None:
    requested_at = datetime.now(UTC)
    response = client.patch(
        f"/todos/{todo.id}",
        json={"text": "Updated text", "completed": True},
        headers={"x-auth": token_user},
    )
    assert response.status_code == 200
    json = response.json()["todo"]
    assert json["text"] == "Updated text"
    assert json["completed"] is True
    completed_at = datetime.fromisoformat(json["completedAt"])
    # The completion date is the moment of the request
    assert requested_at <= completed_at <= datetime.now(UTC)


def test_uncomplete_todo(client: TestClient) -> None:
    response = client.patch(
        f"/todos/{completed_todo.id}",
        json={"completed": False},
        headers={"x-auth": token_user},
    )
    assert response.status_code == 200
    json = response.json()["todo"]
    # The text is kept when it is not provided
    assert json["text"] == "Second test todo"
    assert json["completed"] is False
    assert json["completedAt"] is None


def test_update_todo_with_non_boolean_completed(client: TestClient) -> None:
    response = client.patch(
        f"/todos/{completed_todo.id}",
        json={"completed": True},
        headers={"x-auth": token_user},
    )
    assert response.status_code == 200
    assert response.json()["todo"]["completed"] is True

    # Only the boolean true marks a todo as completed
    response = client.patch(
        f"/todos/{completed_todo.id}",
        json={"completed": "true"},
        headers={"x-auth": token_user},
    )
    assert response.status_code == 200
    json = response.json()["todo"]
    assert json["completed"] is False
    assert json["completedAt"] is None


def test_delete_todo_of_another_user(client: TestClient) -> None:
    response = client.delete(
        f"/todos/{other_user_todo.id}",
        headers={"x-auth": token_user},
    )
    assert response.status_code == 404

    response = client.get(
        f"/todos/{other_user_todo.id}",
        headers={"x-auth": token_other_user},
    )
    assert response.status_code == 200


def test_delete_todo(client: TestClient) -> None:
    response = client.delete(
        f"/todos/{todo.id}",
        headers={"x-auth": token_user},
    )
    assert response.status_code == 200
    assert response.json()["todo"]["_id"] == str(todo.id)

    response = client.get(
        f"/todos/{todo.id}",
        headers={"x-auth": token_user},
    )
    assert response.status_code == 404

    response = client.delete(
        f"/todos/{todo.id}",
        headers={"x-auth": token_user},
    )
    assert response.status_code == 404


@pytest.mark.parametrize("method", ["GET", "PATCH", "DELETE"])
@pytest.mark.parametrize(
    "todo_id",
    [
        "123abc",
        # A canonical identifier followed by an url-encoded newline
        "{todo_id}%0A",
        "{{{todo_id}}}",
        "{todo_hex}",
    ],
)
def test_todo_with_malformed_id(
    method: str,
    todo_id: str,
    client: TestClient,
) -> None:
    path_id = todo_id.format(
        todo_id=second_completed_todo.id,
        todo_hex=second_completed_todo.id.hex,
    )
    response = client.request(
        method,
        f"/todos/{path_id}",
        json={"completed": False} if method == "PATCH" else None,
        headers={"x-auth": token_user},
    )
    assert response.status_code == 404

    # The todo designated by the malformed identifier is left untouched
    response = client.get(
        f"/todos/{second_completed_todo.id}",
        headers={"x-auth": token_user},
    )
    assert response.status_code == 200
    assert response.json()["todo"]["completed"] is True


def test_update_todo_without_completed(client: TestClient) -> None:
    response = client.patch(
        f"/todos/{second_completed_todo.id}",
        json={"completed": True},
        headers={"x-auth": token_user},
    )
    assert response.status_code == 200
    assert response.json()["todo"]["completedAt"] is not None

    # A missing `completed` marks the todo as not completed
    response = client.patch(
        f"/todos/{second_completed_todo.id}",
        json={"text": "Third test todo, renamed"},
        headers={"x-auth": token_user},
    )
    assert response.status_code == 200
    json = response.json()["todo"]
    assert json["text"] == "Third test todo, renamed"
    assert json["completed"] is False
    assert json["completedAt"] is None


def test_update_todo_ignores_other_fields(client: TestClient) -> None:
    response = client.patch(
        f"/todos/{second_completed_todo.id}",
        json={
            "_id": str(uuid.uuid4()),
            "_creator": other_user.id,
            "completedAt": "2020-01-01T00:00:00Z",
            "completed": False,
        },
        headers={"x-auth": token_user},
    )
    assert response.status_code == 200
    json = response.json()["todo"]
    assert json["_id"] == str(second_completed_todo.id)
    assert json["_creator"] == user.id
    assert json["completedAt"] is None

    # The owner did not change
    response = client.get(
        f"/todos/{second_completed_todo.id}",
        headers={"x-auth": token_other_user},
    )
    assert response.status_code == 404
    response = client.get(
        f"/todos/{second_completed_todo.id}",
        headers={"x-auth": token_user},
    )
    assert response.status_code == 200
    assert response.json()["todo"]["completedAt"] is None
