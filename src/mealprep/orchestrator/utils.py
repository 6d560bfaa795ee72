from __future__ import annotations

"""Small helpers for reading durations and orchestrator settings from params."""

from typing import Dict, Optional


def _get(d: Dict, *keys, default=None):
    cur = d
    for k in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(k)
        if cur is None:
            return default
    return cur


def _positive(value, what: str) -> float:
    value = float(value)
    if value <= 0:
        raise ValueError(f"{what} must be positive, got {value}")
    return value


def time_unit(p: Dict) -> float:
    """Seconds per time unit."""
    return _positive(_get(p, "project", "time_unit", default=1.0), "project.time_unit")


def runs_dir(p: Dict) -> Optional[str]:
    return _get(p, "project", "runs_dir", default=None)


def log_file(p: Dict) -> Optional[str]:
    return _get(p, "project", "log_file", default=None)


def strategy(p: Dict) -> str:
    return str(_get(p, "orchestrator", "strategy", default="join")).strip().lower()


def task_duration(p: Dict, name: str, default: float = 1) -> float:
    """Duration of a task in seconds (configured units times the time unit)."""
    units = _positive(
        _get(p, "tasks", name, "duration", default=default), f"tasks.{name}.duration"
    )
    return units * time_unit(p)


def fixed_wait(p: Dict) -> float:
    units = _positive(_get(p, "orchestrator", "wait", default=3), "orchestrator.wait")
    return units * time_unit(p)


def join_timeout(p: Dict) -> float:
    units = _positive(
        _get(p, "orchestrator", "timeout", default=3), "orchestrator.timeout"
    )
    return units * time_unit(p)
