from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from todo_api.app import get_application
from todo_api.dependencies import get_settings, init_app_state
from tests.commons import override_get_settings, override_init_app_state, settings


@pytest.fixture(scope="module", autouse=True)
def client() -> Generator[TestClient, None, None]:
    """
    Each test module gets an application running on an empty test database.
    """
    test_app = get_application(settings=settings, drop_db=True)
    test_app.dependency_overrides[init_app_state] = override_init_app_state
    test_app.dependency_overrides[get_settings] = override_get_settings

    # The lifespan, which creates the tables, only runs when the client is used as a context manager
    with TestClient(test_app) as test_client:
        yield test_client
