import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_ean13_logger():
    """Drop handlers that setup_logging() attached during a test."""
    yield
    root = logging.getLogger("ean13")
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.addHandler(logging.NullHandler())
    root.setLevel(logging.NOTSET)
