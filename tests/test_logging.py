"""Tests for logging_config.py."""

import logging

import pytest
from rich.logging import RichHandler

from orgcheck.logging_config import dataset_logger, get_logger, recipe_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger("orgcheck")
    handlers, level, propagate = list(root.handlers), root.level, root.propagate
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    root.propagate = propagate


class TestGetLogger:
    def test_short_names_are_prefixed(self):
        assert get_logger("core.factory").name == "orgcheck.core.factory"

    def test_module_names_are_kept(self):
        assert get_logger("orgcheck.cache").name == "orgcheck.cache"

    def test_lookalike_prefix_is_not_trusted(self):
        assert get_logger("orgcheckers").name == "orgcheck.orgcheckers"

    def test_root(self):
        assert get_logger().name == "orgcheck"

    def test_per_alias_loggers(self):
        assert dataset_logger("user-roles").name == "orgcheck.dataset.user-roles"
        assert recipe_logger("role-tree").name == "orgcheck.recipe.role-tree"


class TestSetupLogging:
    @pytest.mark.parametrize(
        "verbosity,level",
        [("quiet", logging.ERROR), ("normal", logging.WARNING), ("verbose", logging.DEBUG)],
    )
    def test_levels(self, verbosity, level):
        assert setup_logging(verbosity).level == level

    def test_unknown_verbosity_falls_back_to_warning(self):
        assert setup_logging("chatty").level == logging.WARNING

    def test_repeated_setup_keeps_one_handler(self):
        setup_logging("verbose")
        logger = setup_logging("quiet")

        assert len([h for h in logger.handlers if isinstance(h, RichHandler)]) == 1
        assert logger.propagate is False
