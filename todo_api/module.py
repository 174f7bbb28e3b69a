"""
Discovery of the modules: every `endpoints_*.py` file of `todo_api/core/*/` and `todo_api/modules/*/` is imported
and the `Module` it declares is enabled.
"""

import importlib
import logging
from pathlib import Path

from todo_api.types.module import Module

todo_api_error_logger = logging.getLogger("todo_api.error")

PACKAGE_PATH = Path(__file__).parent


def discover_modules(directory: str, attribute: str) -> list[Module]:
    modules: list[Module] = []
    for endpoints_file in sorted(PACKAGE_PATH.glob(f"{directory}/*/endpoints_*.py")):
        endpoints = importlib.import_module(
            f"todo_api.{directory}.{endpoints_file.parent.name}.{endpoints_file.stem}",
        )
        declared_module = getattr(endpoints, attribute, None)
        if declared_module is None:
            todo_api_error_logger.error(
                f"{endpoints_file} has no `{attribute}` attribute, its endpoints are disabled",
            )
            continue
        modules.append(declared_module)
    return modules


module_list = discover_modules("modules", "module")
core_module_list = discover_modules("core", "core_module")
all_modules = core_module_list + module_list
