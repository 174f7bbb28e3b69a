"""
Create or upgrade the production database, then exit.

Run it once before starting the server, when several workers would otherwise initialize the database concurrently.
"""

import logging

from todo_api.app import init_db
from todo_api.core.utils.config import construct_prod_settings
from todo_api.core.utils.log import LogConfig

settings = construct_prod_settings()
LogConfig().initialize_loggers(settings=settings)

init_db(
    settings=settings,
    todo_api_error_logger=logging.getLogger("todo_api.error"),
)
