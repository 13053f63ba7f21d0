"""Watch task: bind the rebuild subscriptions to the running proxy.

The reload-only watch on the output root is registered by `web_server` before
the proxy starts serving, so only subscriptions with a reaction are bound here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from ..orchestrator import task
from ..orchestrator.errors import PipelineError
from ..orchestrator.utils import runtime
from ..watcher import Watcher, watch_delay


@task(name="watch")
def watch_files(params: Dict, sources: List[Path]):
    # graph imports this module to compose the default pipeline
    from ..orchestrator.graph import watch_subscriptions

    proxy = runtime(params).get("proxy")
    if proxy is None:
        raise PipelineError("watch needs the live-reload proxy; run it after 'server'")
    subs = [s for s in watch_subscriptions(params) if not s.reload_only]
    watcher = Watcher(subs, params, delay=watch_delay(params))
    watcher.bind(proxy)
    runtime(params)["watcher"] = watcher
