#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/utils/decorators.py
"""Utility decorators for md2runs components.

Optional third-party packages (mistune, reportlab, httpx, Pillow) are imported
lazily inside the functions that need them. The decorators here check their
availability up front so callers get a single, actionable DependencyError
instead of a bare ImportError from deep inside a conversion.

"""

from __future__ import annotations

import importlib
import inspect
import logging
import time
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Generator, List, Tuple

from md2runs.exceptions import DependencyError
from md2runs.utils.packages import check_version_requirement


def _check_packages(component_name: str, packages: List[Tuple[str, str, str]]) -> None:
    missing = []
    version_mismatches = []
    original_error = None

    for install_name, import_name, version_spec in packages:
        try:
            # nosemgrep: python.lang.security.audit.non-literal-import.non-literal-import
            importlib.import_module(import_name)

            if version_spec:
                meets_requirement, installed_version = check_version_requirement(install_name, version_spec)
                if not meets_requirement:
                    version_mismatches.append((install_name, version_spec, installed_version or "unknown"))

        except ImportError as e:
            missing.append((install_name, version_spec))
            if original_error is None:
                original_error = e

    if missing or version_mismatches:
        raise DependencyError(
            component_name=component_name,
            missing_packages=missing,
            version_mismatches=version_mismatches,
            original_import_error=original_error,
        ) from original_error


def requires_dependencies(component_name: str, packages: List[Tuple[str, str, str]]) -> Callable:
    """Check required dependencies and versions before a function runs.

    Works for both plain and ``async`` functions; for coroutine functions the
    check runs when the coroutine starts executing.

    Parameters
    ----------
    component_name : str
        Name of the component (e.g., "markdown", "images"). Appears in error
        messages to help users identify which feature needs dependencies.
    packages : list of tuple
        Required packages as (install_name, import_name, version_spec) tuples

    Returns
    -------
    Callable
        Decorated function that checks dependencies before execution

    Raises
    ------
    DependencyError
        If any required package is missing or has an incompatible version.

    Examples
    --------
        >>> @requires_dependencies("markdown", [("mistune", "mistune", ">=3.0.0")])
        ... def parse(self, text):
        ...     import mistune
        ...     # parsing logic here

    """

    def decorator(method: Callable) -> Callable:
        if inspect.iscoroutinefunction(method):

            @wraps(method)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                _check_packages(component_name, packages)
                return await method(*args, **kwargs)

            return async_wrapper

        @wraps(method)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            _check_packages(component_name, packages)
            return method(*args, **kwargs)

        return wrapper

    return decorator


@contextmanager
def debug_timer(logger: logging.Logger, operation: str) -> Generator[None, None, None]:
    """Time a block of code and log the elapsed time at DEBUG level.

    Parameters
    ----------
    logger : logging.Logger
        Logger instance to use for DEBUG messages
    operation : str
        Description of the operation being timed (e.g., "Conversion")

    Notes
    -----
    Zero overhead when DEBUG logging is disabled.

    """
    if logger.isEnabledFor(logging.DEBUG):
        start_time = time.perf_counter()
        yield
        elapsed = time.perf_counter() - start_time
        logger.debug(f"{operation} completed in {elapsed:.4f}s")
    else:
        yield
