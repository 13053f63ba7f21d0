from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Union

from .errors import ParallelTaskError, PipelineError, TaskFailedError
from .files import collect
from .logging import get_logger
from .utils import project_root


# Allow static lists or callables that build patterns from params
PathSpec = Union[List[str], Callable[[dict], List[str]]]

SERIES = "series"
PARALLEL = "parallel"


@dataclass(frozen=True)
class TaskSpec:
    name: str
    inputs: PathSpec
    outputs: PathSpec
    fn: Callable[..., None]


def task(name: str, inputs: PathSpec = (), outputs: PathSpec = ()):
    """Decorator to declare a task on a function.

    The wrapped function is called as `fn(params=..., sources=...)` where
    `params` is the parsed config and `sources` the files matched by `inputs`,
    resolved fresh on every call.
    """

    def deco(fn: Callable[..., None]):
        spec = TaskSpec(name=name, inputs=inputs, outputs=outputs, fn=fn)
        setattr(fn, "_task_spec", spec)
        return fn

    return deco


@dataclass(frozen=True)
class Composite:
    kind: str
    children: tuple
    name: str

    def __post_init__(self):
        if self.kind not in (SERIES, PARALLEL):
            raise ValueError(f"Unknown composite kind: {self.kind}")
        if not self.children:
            raise ValueError(f"Composite '{self.name}' has no children")


Node = Union[TaskSpec, Composite]


def as_node(obj) -> Node:
    """Accept a TaskSpec, a Composite, or a function decorated with @task."""
    if isinstance(obj, (TaskSpec, Composite)):
        return obj
    spec = getattr(obj, "_task_spec", None)
    if isinstance(spec, TaskSpec):
        return spec
    raise TypeError(f"Not a task or composite: {obj!r}")


def _composite(kind: str, children, name: str | None) -> Composite:
    nodes = tuple(as_node(c) for c in children)
    if name is None:
        name = f"{kind}({', '.join(node_name(n) for n in nodes)})"
    return Composite(kind=kind, children=nodes, name=name)


def series(*children, name: str | None = None) -> Composite:
    return _composite(SERIES, children, name)


def parallel(*children, name: str | None = None) -> Composite:
    return _composite(PARALLEL, children, name)


def node_name(node: Node) -> str:
    return node.name


def describe(node: Node) -> str:
    """Render a node as a one-line plan, e.g. `series(clean, parallel(a, b))`."""
    node = as_node(node)
    if isinstance(node, TaskSpec):
        return node.name
    inner = ", ".join(describe(c) for c in node.children)
    return f"{node.kind}({inner})"


def task_names(node: Node) -> list[str]:
    """Leaf task names in declaration order."""
    node = as_node(node)
    if isinstance(node, TaskSpec):
        return [node.name]
    out: list[str] = []
    for c in node.children:
        out.extend(task_names(c))
    return out


@dataclass
class StepRecord:
    name: str
    status: str
    duration: float
    sources: int = 0
    error: str | None = None


@dataclass
class _RunState:
    steps: list[StepRecord] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def record(self, step: StepRecord) -> None:
        with self.lock:
            self.steps.append(step)


class Pipeline:
    """Executes a tree of tasks tagged series/parallel."""

    def __init__(self, root, name: str = "pipeline"):
        self.root = as_node(root)
        self.name = name
        self.logger = get_logger(f"orchestrator.{self.name}")

    def run(self, params: dict) -> list[StepRecord]:
        run_id = time.strftime("%Y%m%d-%H%M%S")

        # Expose runtime metadata to tasks; the runtime dict is shared with the
        # caller so started servers outlive the run
        rt = params.setdefault("runtime", {})
        params = dict(params)
        rt["run_id"] = run_id

        self.logger.info("Plan: %s", describe(self.root))
        state = _RunState()
        self._run_node(self.root, params, state)
        return state.steps

    def _run_node(self, node: Node, params: dict, state: _RunState) -> None:
        if isinstance(node, TaskSpec):
            self._run_task(node, params, state)
        elif node.kind == SERIES:
            for child in node.children:
                self._run_node(child, params, state)
        else:
            self._run_parallel(node, params, state)

    def _run_parallel(self, node: Composite, params: dict, state: _RunState) -> None:
        errors: list[PipelineError] = []
        with ThreadPoolExecutor(
            max_workers=len(node.children), thread_name_prefix=node.name
        ) as pool:
            futures = [
                pool.submit(self._run_node, child, params, state)
                for child in node.children
            ]
            for fut in futures:
                try:
                    fut.result()
                except PipelineError as e:
                    errors.append(e)
        if errors:
            raise ParallelTaskError(node.name, errors)

    def _run_task(self, spec: TaskSpec, params: dict, state: _RunState) -> None:
        step_logger = get_logger(f"orchestrator.{self.name}.{spec.name}")
        started = time.monotonic()
        sources: list[Path] = []
        try:
            root = project_root(params)
            sources = collect(_resolve_paths(spec.inputs, params), root)
            for out in _resolve_paths(spec.outputs, params):
                (root / out).mkdir(parents=True, exist_ok=True)
            step_logger.info("Run: %s (%d source file(s))", spec.name, len(sources))
            spec.fn(params=params, sources=sources)
        except Exception as e:  # noqa: BLE001
            step_logger.exception("Step failed (%s)", spec.name)
            state.record(
                StepRecord(
                    name=spec.name,
                    status="error",
                    duration=time.monotonic() - started,
                    sources=len(sources),
                    error=str(e),
                )
            )
            raise TaskFailedError(spec.name, e) from e
        duration = time.monotonic() - started
        step_logger.info("Done: %s in %.2fs", spec.name, duration)
        state.record(
            StepRecord(
                name=spec.name, status="ok", duration=duration, sources=len(sources)
            )
        )


def _resolve_paths(paths_spec: PathSpec, params: dict) -> list[str]:
    """Resolve a static list of patterns or a callable(params) into a list[str].

    Callables receive the full params dict and must return a list of pattern strings.
    """
    if callable(paths_spec):
        paths = paths_spec(params)
    else:
        paths = paths_spec
    if paths is None:
        return []
    return [str(p) for p in paths]
