"""Start the server with `python -m todo_api`, listening on the configured port."""

import uvicorn

from todo_api.dependencies import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run("todo_api.main:app", host="0.0.0.0", port=settings.PORT)  # noqa: S104
