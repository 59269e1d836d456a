from __future__ import annotations

import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_relief_logger():
    # relief.cli binds a handler to whatever sys.stdout is during the test
    yield
    logger = logging.getLogger("relief")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
