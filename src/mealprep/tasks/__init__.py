"""Task modules live here.

Each module declares one kitchen task with `@orchestrator.task(name=...)`.
Modules are discovered by the CLI; keep tasks modular per file.
"""
