# tests/conftest.py

import logging
import pytest

from doc_catalog.utils.logger import HANDLER_MARKER


@pytest.fixture(autouse=True)
def reset_app_logging():
    """Removes the handlers the CLI attaches to the root logger so tests stay isolated."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if getattr(handler, HANDLER_MARKER, False):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
