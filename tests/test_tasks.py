import time

from mealprep.orchestrator import TaskSpec
from mealprep.tasks.boil import boil_water
from mealprep.tasks.chop import chop_vegetables


def test_task_decorator_attaches_spec():
    spec = boil_water._task_spec
    assert isinstance(spec, TaskSpec)
    assert spec.name == "boil_water"
    assert spec.fn is boil_water
    assert spec.description.startswith("Boil water")


def test_boil_water_prints_start_then_finish(capsys, fast_params):
    start = time.monotonic()
    boil_water(params=fast_params)
    elapsed = time.monotonic() - start
    assert capsys.readouterr().out.splitlines() == ["Boiling water...", "Water boiled"]
    assert elapsed >= 2 * 0.05


def test_chop_vegetables_prints_start_then_finish(capsys, fast_params):
    start = time.monotonic()
    chop_vegetables(params=fast_params)
    elapsed = time.monotonic() - start
    assert capsys.readouterr().out.splitlines() == [
        "Chopping vegetables...",
        "Vegetables chopped",
    ]
    assert elapsed >= 0.05


def test_duration_follows_config(capsys, fast_params):
    fast_params["tasks"]["chop_vegetables"]["duration"] = 4
    start = time.monotonic()
    chop_vegetables(params=fast_params)
    assert time.monotonic() - start >= 4 * 0.05
