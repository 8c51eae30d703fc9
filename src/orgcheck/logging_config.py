"""
Logging configuration for Org Check.

Every logger lives under the ``orgcheck`` namespace. Datasets and recipes get
one child logger per alias (``orgcheck.dataset.<alias>``,
``orgcheck.recipe.<alias>``) so a single noisy extraction can be filtered
without touching the rest.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT = "orgcheck"

_LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}


def setup_logging(verbosity: str = "normal") -> logging.Logger:
    """
    Attach a rich stderr handler to the orgcheck logger.

    Calling it again replaces the handler instead of stacking a second one,
    so the CLI can be invoked repeatedly in one process.

    Args:
        verbosity: quiet, normal or verbose (see OrgCheckConfig.verbosity)

    Returns:
        The orgcheck root logger
    """
    level = _LEVELS.get(verbosity, logging.WARNING)
    verbose = level == logging.DEBUG

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_time=True,
        show_path=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logger = logging.getLogger(ROOT)
    for old in [h for h in logger.handlers if isinstance(h, RichHandler)]:
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger under the orgcheck namespace.

    Args:
        name: Module name (e.g., 'orgcheck.core.factory') or a short
              name that gets prefixed (e.g., 'dataset.user-roles')

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger(ROOT)

    if name != ROOT and not name.startswith(f"{ROOT}."):
        name = f"{ROOT}.{name}"

    return logging.getLogger(name)


def dataset_logger(alias: str) -> logging.Logger:
    """Logger handed to a dataset while it runs."""
    return get_logger(f"dataset.{alias}")


def recipe_logger(alias: str) -> logging.Logger:
    """Logger handed to a recipe while it transforms its data."""
    return get_logger(f"recipe.{alias}")
