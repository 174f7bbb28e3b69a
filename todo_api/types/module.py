from fastapi import APIRouter


class Module:
    """
    A group of endpoints sharing an OpenAPI tag.

    Endpoint files declare their `Module` as `module`, or as `core_module` for account management, and decorate
    their endpoints with its `router`.
    """

    def __init__(self, tag: str):
        self.tag = tag
        self.router = APIRouter(tags=[tag])
