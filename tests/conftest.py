import logging
import threading
from logging.handlers import RotatingFileHandler

import pytest

from mealprep.orchestrator.config import load_config
from mealprep.tasks.boil import boil_water
from mealprep.tasks.chop import chop_vegetables


@pytest.fixture(autouse=True)
def join_leftover_threads():
    """Wait for task threads a test left running so their output stays in that test."""
    before = set(threading.enumerate())
    yield
    for t in threading.enumerate():
        if t not in before and t is not threading.current_thread():
            t.join(timeout=5)


@pytest.fixture
def detach_file_handlers():
    yield
    logger = logging.getLogger("mealprep")
    for h in list(logger.handlers):
        if isinstance(h, RotatingFileHandler):
            logger.removeHandler(h)
            h.close()


@pytest.fixture
def fast_params():
    """Default config scaled down so a time unit is 50ms, with a generous join timeout."""
    params = load_config()
    params["project"]["time_unit"] = 0.05
    params["orchestrator"]["timeout"] = 40
    params["orchestrator"]["wait"] = 10
    return params


@pytest.fixture
def meal_specs():
    return {
        "boil_water": boil_water._task_spec,
        "chop_vegetables": chop_vegetables._task_spec,
    }
