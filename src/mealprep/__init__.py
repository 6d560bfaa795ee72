"""Concurrent meal preparation: two simulated kitchen tasks and their orchestrator."""

__version__ = "0.1.0"
