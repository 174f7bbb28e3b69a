"""Router gathering the endpoints of every enabled module"""

from fastapi import APIRouter

from todo_api.module import all_modules

api_router = APIRouter()

for enabled_module in all_modules:
    api_router.include_router(enabled_module.router)
