from __future__ import annotations

import json
import os
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Optional

from .logging import get_logger
from . import utils


STRATEGIES = ("join", "sleep")
COMPLETE_MESSAGE = "Meal preparation complete"


@dataclass
class TaskSpec:
    name: str
    fn: Callable[..., None]
    description: str = ""


def task(name: str, description: Optional[str] = None):
    """Decorator to declare a task on a function.

    The wrapped function should accept a single dict `params` (parsed config)
    and return nothing.
    """

    def deco(fn: Callable[..., None]):
        doc = (fn.__doc__ or "").strip().splitlines()
        spec = TaskSpec(
            name=name,
            fn=fn,
            description=description if description is not None else (doc[0] if doc else ""),
        )
        setattr(fn, "_task_spec", spec)
        return fn

    return deco


@dataclass
class TaskOutcome:
    name: str
    status: str = "pending"
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    error: Optional[str] = None
    exc: Optional[BaseException] = field(default=None, repr=False, compare=False)

    @property
    def elapsed(self) -> Optional[float]:
        if self.started_at is None or self.finished_at is None:
            return None
        return self.finished_at - self.started_at


@dataclass
class RunReport:
    kitchen: str
    strategy: str
    run_id: str
    outcomes: list[TaskOutcome]

    @property
    def ok(self) -> bool:
        return all(o.status == "ok" for o in self.outcomes)

    def outcome(self, name: str) -> TaskOutcome:
        for o in self.outcomes:
            if o.name == name:
                return o
        raise KeyError(name)

    def to_dict(self) -> dict:
        return {
            "kitchen": self.kitchen,
            "strategy": self.strategy,
            "run_id": self.run_id,
            "python": sys.version,
            "steps": [
                {
                    "name": o.name,
                    "status": o.status,
                    "elapsed": o.elapsed,
                    "error": o.error,
                }
                for o in self.outcomes
            ],
        }


class MealPrepError(RuntimeError):
    def __init__(self, message: str, report: RunReport):
        super().__init__(message)
        self.report = report


class JoinTimeoutError(MealPrepError):
    """Some tasks were still running when the join timeout expired."""

    def __init__(self, pending: list[str], timeout: float, report: RunReport):
        super().__init__(
            f"Tasks not finished after {timeout:g}s: {', '.join(pending)}", report
        )
        self.pending = pending
        self.timeout = timeout


class TaskFailedError(MealPrepError):
    """Some tasks raised while running."""

    def __init__(self, failures: dict[str, BaseException], report: RunReport):
        detail = "; ".join(f"{name}: {exc}" for name, exc in failures.items())
        super().__init__(f"Tasks failed: {detail}", report)
        self.failures = failures


class Kitchen:
    """Dispatches tasks concurrently and decides when the meal is done.

    Two join strategies are available. ``join`` waits on a completion signal
    per task, bounded by ``orchestrator.timeout``. ``sleep`` fires the tasks
    on daemon threads and sleeps ``orchestrator.wait`` instead of joining,
    so its completion line can precede a slow task's output.
    """

    def __init__(self, tasks: dict[str, TaskSpec], name: str = "meal"):
        self.name = name
        self.tasks = tasks
        self.logger = get_logger(f"mealprep.{self.name}")

    def _select(self, only_step: str | None) -> list[str]:
        if only_step:
            if only_step not in self.tasks:
                raise KeyError(f"Unknown step: {only_step}")
            return [only_step]
        return list(self.tasks)

    def run(
        self,
        params: dict,
        strategy: str | None = None,
        only_step: str | None = None,
    ) -> RunReport:
        strategy = (strategy or utils.strategy(params)).strip().lower()
        if strategy not in STRATEGIES:
            raise ValueError(
                f"Unknown strategy: {strategy} (expected one of {', '.join(STRATEGIES)})"
            )
        selected = self._select(only_step)
        if not selected:
            raise ValueError(f"No tasks to run in kitchen {self.name}")
        run_id = time.strftime("%Y%m%d-%H%M%S")

        # Expose runtime metadata to tasks
        params = dict(params)
        params["runtime"] = {"run_id": run_id, "strategy": strategy}

        self.logger.info(
            "Dispatching: %s (strategy=%s)", ", ".join(selected), strategy
        )
        outcomes = {n: TaskOutcome(name=n) for n in selected}
        if strategy == "sleep":
            report = self._run_fixed_sleep(params, run_id, outcomes)
        else:
            report = self._run_join(params, run_id, outcomes)
        return report

    def _execute(self, spec: TaskSpec, params: dict, outcome: TaskOutcome) -> None:
        step_logger = get_logger(f"mealprep.{self.name}.{spec.name}")
        outcome.status = "running"
        outcome.started_at = time.monotonic()
        step_logger.debug("Run: %s", spec.name)
        try:
            spec.fn(params=params)
        except Exception as e:  # noqa: BLE001
            outcome.finished_at = time.monotonic()
            outcome.error = str(e)
            outcome.exc = e
            outcome.status = "error"
            step_logger.exception("Step failed (%s)", spec.name)
            return
        outcome.finished_at = time.monotonic()
        outcome.status = "ok"
        step_logger.debug("Done: %s in %.3fs", spec.name, outcome.elapsed)

    def _run_fixed_sleep(
        self, params: dict, run_id: str, outcomes: dict[str, TaskOutcome]
    ) -> RunReport:
        delay = utils.fixed_wait(params)
        for step_name, outcome in outcomes.items():
            t = threading.Thread(
                target=self._execute,
                args=(self.tasks[step_name], params, outcome),
                name=f"{self.name}-{step_name}",
                daemon=True,
            )
            t.start()

        self.logger.debug("Sleeping %.3fs instead of joining", delay)
        time.sleep(delay)

        report = RunReport(
            kitchen=self.name,
            strategy="sleep",
            run_id=run_id,
            outcomes=[replace(o) for o in outcomes.values()],
        )
        unfinished = [o.name for o in report.outcomes if o.status in ("pending", "running")]
        if unfinished:
            self.logger.warning(
                "Still running after the fixed wait of %.3fs: %s",
                delay,
                ", ".join(unfinished),
            )
        _write_state(params, report)
        print(COMPLETE_MESSAGE, flush=True)
        return report

    def _run_join(
        self, params: dict, run_id: str, outcomes: dict[str, TaskOutcome]
    ) -> RunReport:
        timeout = utils.join_timeout(params)
        executor = ThreadPoolExecutor(
            max_workers=len(outcomes), thread_name_prefix=self.name
        )
        futures = {
            executor.submit(self._execute, self.tasks[n], params, o): n
            for n, o in outcomes.items()
        }
        _, not_done = wait(futures, timeout=timeout)
        # Tasks cannot be cancelled; stragglers keep running in the background
        executor.shutdown(wait=False)

        snapshot: list[TaskOutcome] = []
        for f, n in futures.items():
            if f in not_done:
                snapshot.append(replace(outcomes[n], status="timeout"))
            elif f.exception() is not None:
                # Only a non-Exception can escape _execute
                exc = f.exception()
                snapshot.append(
                    replace(outcomes[n], status="error", error=repr(exc), exc=exc)
                )
            else:
                snapshot.append(replace(outcomes[n]))
        report = RunReport(
            kitchen=self.name, strategy="join", run_id=run_id, outcomes=snapshot
        )
        _write_state(params, report)

        pending = [o.name for o in report.outcomes if o.status == "timeout"]
        if pending:
            self.logger.error(
                "Join timed out after %.3fs, still running: %s",
                timeout,
                ", ".join(pending),
            )
            raise JoinTimeoutError(pending, timeout, report)
        failures = {o.name: o.exc for o in report.outcomes if o.status == "error"}
        if failures:
            raise TaskFailedError(failures, report)

        print(COMPLETE_MESSAGE, flush=True)
        return report


def _write_state(params: dict, report: RunReport) -> None:
    base = utils.runs_dir(params)
    if not base:
        return
    run_dir = Path(base) / report.kitchen / report.run_id
    os.makedirs(run_dir, exist_ok=True)
    with open(run_dir / "state.json", "w", encoding="utf-8") as f:
        json.dump(report.to_dict(), f, indent=2)
