import logging

import pytest

from logger import HANDLER_NAME, setup_logging


@pytest.fixture
def root_handlers():
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    yield root
    root.handlers[:] = saved[0]
    root.setLevel(saved[1])


class TestSetupLogging:
    def test_installs_named_handler_once(self, root_handlers):
        """Should not duplicate the handler when called again."""
        setup_logging("INFO")
        setup_logging("DEBUG")

        named = [h for h in root_handlers.handlers if h.get_name() == HANDLER_NAME]
        assert len(named) == 1
        assert named[0].level == logging.DEBUG
        assert root_handlers.level == logging.DEBUG

    def test_quiets_httpx(self, root_handlers):
        setup_logging("DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
