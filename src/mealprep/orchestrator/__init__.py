"""Lightweight in-repo orchestrator for the meal preparation tasks.

Provides Task and Kitchen primitives, two join strategies, YAML config and a
Typer CLI.
"""

from .core import (  # re-export for convenience
    COMPLETE_MESSAGE,
    JoinTimeoutError,
    Kitchen,
    MealPrepError,
    RunReport,
    TaskFailedError,
    TaskOutcome,
    TaskSpec,
    task,
)

__all__ = [
    "COMPLETE_MESSAGE",
    "JoinTimeoutError",
    "Kitchen",
    "MealPrepError",
    "RunReport",
    "TaskFailedError",
    "TaskOutcome",
    "TaskSpec",
    "task",
]
