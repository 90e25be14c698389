import functools
import importlib
import logging
import pkgutil
import sys
from collections.abc import Callable


def setup_logging(level: str = "INFO") -> None:
    # stdout carries rendered command output only
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format='%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s] : %(message)s',
    )


def import_submodules(package: str) -> list[str]:
    """Import every direct submodule of `package` and return their names."""
    py_package = importlib.import_module(package)
    names = []
    for module_info in pkgutil.iter_modules(py_package.__path__, prefix=f"{package}."):
        importlib.import_module(module_info.name)
        names.append(module_info.name)
    return names


def scan(*packages: str):
    """
    Decorator importing every module of the given packages before the
    decorated function runs, so that registrations made at import time
    (CLI commands) are in place.
    """
    def decorator(func: Callable):

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            for package in packages:
                modules = import_submodules(package)
                logging.getLogger("core.helpers.utils").debug(f"Scanned {package}: {len(modules)} modules")
            return func(*args, **kwargs)

        return wrapper

    return decorator
