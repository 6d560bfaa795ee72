from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path
from typing import Dict, Optional

import typer

from .config import load_config
from .core import Kitchen, MealPrepError, TaskSpec
from .logging import get_logger
from . import utils


app = typer.Typer(add_completion=False, help="Concurrent meal preparation CLI")
log = get_logger("mealprep.cli")


def discover_tasks() -> Dict[str, TaskSpec]:
    """Import all modules in `tasks` package and collect decorated functions."""
    tasks_pkg = "mealprep.tasks"
    specs: Dict[str, TaskSpec] = {}
    try:
        pkg = importlib.import_module(tasks_pkg)
    except ModuleNotFoundError:
        log.warning("No tasks package found.")
        return specs
    for m in pkgutil.iter_modules(pkg.__path__, prefix=f"{tasks_pkg}."):
        try:
            mod = importlib.import_module(m.name)
        except Exception as e:  # noqa: BLE001
            log.warning("Failed to import %s: %s", m.name, e)
            continue
        for attr_name in dir(mod):
            obj = getattr(mod, attr_name)
            spec = getattr(obj, "_task_spec", None)
            if isinstance(spec, TaskSpec):
                specs[spec.name] = spec
    return specs


def _load_params(
    config: Optional[str], time_unit: Optional[float], log_file: Optional[str] = None
) -> dict:
    try:
        params = load_config(config)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Invalid config: {e}", err=True)
        raise typer.Exit(code=1)
    if time_unit is not None:
        params["project"]["time_unit"] = time_unit
    if log_file is not None:
        params["project"]["log_file"] = log_file
    path = utils.log_file(params)
    if path:
        # Handler on the package logger; child loggers propagate to it
        get_logger("mealprep", log_file=Path(path))
    return params


def _prepare(
    config: Optional[str],
    strategy: Optional[str],
    time_unit: Optional[float],
    log_file: Optional[str] = None,
) -> None:
    specs = discover_tasks()
    if not specs:
        typer.echo("No tasks discovered.", err=True)
        raise typer.Exit(code=1)
    params = _load_params(config, time_unit, log_file)
    kitchen = Kitchen(tasks=dict(sorted(specs.items())), name="meal")
    try:
        kitchen.run(params=params, strategy=strategy)
    except (MealPrepError, ValueError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def default(ctx: typer.Context):
    """Prepare the meal with the built-in defaults when no command is given."""
    if ctx.invoked_subcommand is None:
        _prepare(config=None, strategy=None, time_unit=None)


@app.command("list")
def list_tasks():
    """List discovered tasks."""
    specs = discover_tasks()
    if not specs:
        typer.echo("No tasks discovered.")
        raise typer.Exit(code=0)
    typer.echo("Discovered tasks:")
    for name in sorted(specs.keys()):
        desc = specs[name].description
        typer.echo(f"- {name}: {desc}" if desc else f"- {name}")


@app.command()
def prepare(
    config: Optional[str] = typer.Option(None, help="Path to YAML config"),
    strategy: Optional[str] = typer.Option(
        None, help="Join strategy: join (wait for completion) or sleep (fixed wait)"
    ),
    time_unit: Optional[float] = typer.Option(None, help="Seconds per time unit"),
    log_file: Optional[str] = typer.Option(None, help="Also write logs to this file"),
):
    """Run every discovered task concurrently and declare the meal complete."""
    _prepare(config=config, strategy=strategy, time_unit=time_unit, log_file=log_file)


@app.command()
def run_task(
    name: str = typer.Argument(..., help="Task name to run"),
    config: Optional[str] = typer.Option(None, help="Path to YAML config"),
    time_unit: Optional[float] = typer.Option(None, help="Seconds per time unit"),
    log_file: Optional[str] = typer.Option(None, help="Also write logs to this file"),
):
    """Run a single task by name."""
    specs = discover_tasks()
    if name not in specs:
        typer.echo(f"Task not found: {name}", err=True)
        raise typer.Exit(code=1)
    params = _load_params(config, time_unit, log_file)
    kitchen = Kitchen(tasks={name: specs[name]}, name=f"task.{name}")
    try:
        kitchen.run(params=params, strategy="join", only_step=name)
    except (MealPrepError, ValueError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
