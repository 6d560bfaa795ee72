"""Chop vegetables."""

import time

from ..orchestrator import task
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import task_duration


@task(name="chop_vegetables")
def chop_vegetables(params: dict):
    """Chop vegetables for the default one time unit."""
    logger = get_logger("mealprep.tasks.chop_vegetables")
    duration = task_duration(params, "chop_vegetables", default=1)
    print("Chopping vegetables...", flush=True)
    logger.debug("Simulating %.3fs of chopping", duration)
    time.sleep(duration)
    print("Vegetables chopped", flush=True)
