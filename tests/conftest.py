import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_pixelpad_logger():
    yield
    logger = logging.getLogger("pixelpad")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
