from __future__ import annotations

import copy
from pathlib import Path

import yaml


DEFAULT_CONFIG: dict = {
    "project": {"time_unit": 1.0, "runs_dir": None, "log_file": None},
    "orchestrator": {"strategy": "join", "wait": 3, "timeout": 3},
    "tasks": {
        "boil_water": {"duration": 2},
        "chop_vegetables": {"duration": 1},
    },
}


def _merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path: str | Path | None = None) -> dict:
    """Return the built-in defaults, deep-merged with a YAML file when given."""
    params = copy.deepcopy(DEFAULT_CONFIG)
    if path is None:
        return params
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    with open(p, "r", encoding="utf-8") as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config must be a mapping at the top level: {p}")
    return _merge(params, loaded)
