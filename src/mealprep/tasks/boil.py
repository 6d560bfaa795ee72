"""Boil water: the slower of the two kitchen tasks."""

import time

from ..orchestrator import task
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import task_duration


@task(name="boil_water")
def boil_water(params: dict):
    """Boil water for the default two time units."""
    logger = get_logger("mealprep.tasks.boil_water")
    duration = task_duration(params, "boil_water", default=2)
    print("Boiling water...", flush=True)
    logger.debug("Simulating %.3fs of boiling", duration)
    time.sleep(duration)
    print("Water boiled", flush=True)
