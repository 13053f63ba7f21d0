"""Lightweight in-repo orchestrator for the asset pipeline.

Provides Task and Composite primitives, a series/parallel executor, and a Typer CLI.
"""

from .core import Composite, Pipeline, TaskSpec, describe, parallel, series, task  # re-export for convenience

__all__ = ["Composite", "Pipeline", "TaskSpec", "describe", "parallel", "series", "task"]
