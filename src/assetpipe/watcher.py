"""File-watch subscriptions.

A subscription ties one watched directory (plus include/exclude patterns
relative to it) to a reaction: a task node to re-run, or nothing, in which
case the change only reloads the browser. Subscriptions are bound to any
server exposing livereload's `watch(path, func, delay, ignore)`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from .orchestrator.core import Node, Pipeline, describe
from .orchestrator.errors import PipelineError
from .orchestrator.files import matches
from .orchestrator.logging import get_logger
from .orchestrator.utils import dist_dir, project_root, section

log = get_logger("assetpipe.watch")


class WatchServer(Protocol):
    def watch(
        self,
        path: str,
        func: Optional[Callable[[], None]] = None,
        delay: Optional[float] = None,
        ignore: Optional[Callable[[str], bool]] = None,
    ) -> None: ...


@dataclass(frozen=True)
class Subscription:
    name: str
    root: str
    include: tuple
    exclude: tuple = ()
    reaction: Optional[Node] = None

    @property
    def reload_only(self) -> bool:
        return self.reaction is None

    def matches(self, rel_path: str) -> bool:
        """Whether a path relative to `root` belongs to this subscription."""
        rel_path = Path(rel_path).as_posix()
        if not any(matches(rel_path, pat) for pat in self.include):
            return False
        return not any(matches(rel_path, pat) for pat in self.exclude)


def output_subscription(params: Dict) -> Subscription:
    """Reload-only watch on the output root."""
    return Subscription("output", dist_dir(params), ("**/*",))


def watch_delay(params: Dict) -> Optional[float]:
    return section(params, "watch").get("delay")


class Watcher:
    def __init__(
        self,
        subscriptions: Iterable[Subscription],
        params: Dict,
        delay: Optional[float] = None,
    ):
        self.subscriptions: List[Subscription] = list(subscriptions)
        self.params = params
        self.delay = delay
        self.root = project_root(params)

    def reaction_for(self, sub: Subscription) -> Optional[Callable[[], None]]:
        if sub.reload_only:
            return None
        pipe = Pipeline(sub.reaction, name=f"watch.{sub.name}")

        def react() -> None:
            log.info("Change in %s, running %s", sub.root, describe(sub.reaction))
            try:
                pipe.run(self.params)
            except PipelineError as e:
                # Already logged with traceback by the pipeline; keep watching
                log.error("Watch reaction '%s' failed: %s", sub.name, e)

        return react

    def ignore_for(self, sub: Subscription, watch_dir: Path) -> Callable[[str], bool]:
        def ignore(filename: str) -> bool:
            return not sub.matches(os.path.relpath(filename, watch_dir))

        return ignore

    def bind(self, server: WatchServer) -> None:
        for sub in self.subscriptions:
            watch_dir = self.root / sub.root
            server.watch(
                str(watch_dir),
                self.reaction_for(sub),
                self.delay,
                self.ignore_for(sub, watch_dir),
            )
            kind = "reload" if sub.reload_only else describe(sub.reaction)
            log.info("Watching %s (%s) -> %s", watch_dir, sub.name, kind)
