"""Dev server tasks: start the backend, then the live-reload proxy in front of it.

Both run on background threads; the tasks return once their port is bound so
the proxy never starts before the backend is listening. Started servers are
published in `params["runtime"]` for the watch task and the CLI keepalive.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from ..backend.proxy import LiveReloadProxy, create_proxy_app
from ..backend.server import BackendServer
from ..orchestrator import task
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import dist_dir, project_root, runtime, section
from ..watcher import Watcher, output_subscription, watch_delay

log = get_logger("assetpipe.server")


def _backend_options(params: Dict) -> Dict:
    opts = section(params, "server", "backend")
    return {
        "host": opts.get("host", "127.0.0.1"),
        "port": int(opts.get("port", 8010)),
        "keepalive": bool(opts.get("keepalive", True)),
    }


def _proxy_options(params: Dict) -> Dict:
    opts = section(params, "server", "proxy")
    return {
        "host": opts.get("host", "127.0.0.1"),
        "port": int(opts.get("port", 3000)),
        "open_browser": bool(opts.get("open_browser", True)),
        "restart_delay": int(opts.get("restart_delay", 2)),
    }


@task(name="backend_server")
def backend_server(params: Dict, sources: List[Path]):
    opts = _backend_options(params)
    proxy = _proxy_options(params)
    server = BackendServer(
        root=project_root(params) / dist_dir(params),
        host=opts["host"],
        port=opts["port"],
        cors_origins=[f"http://{proxy['host']}:{proxy['port']}"],
    )
    server.start()
    runtime(params)["backend"] = server


@task(name="web_server")
def web_server(params: Dict, sources: List[Path]):
    rt = runtime(params)
    backend = rt.get("backend")
    if backend is not None:
        target = backend.url
    else:
        opts = _backend_options(params)
        target = f"http://{opts['host']}:{opts['port']}"
    root = project_root(params) / dist_dir(params)
    opts = _proxy_options(params)
    proxy = LiveReloadProxy(
        app=create_proxy_app(target, root),
        root=root,
        host=opts["host"],
        port=opts["port"],
        open_browser=opts["open_browser"],
        restart_delay=opts["restart_delay"],
    )
    # livereload watches the whole cwd if it starts with no watches registered
    Watcher([output_subscription(params)], params, delay=watch_delay(params)).bind(proxy)
    proxy.start()
    rt["proxy"] = proxy
    log.info("Proxying %s -> %s", proxy.url, target)


def keep_alive(params: Dict) -> None:
    """Block while started servers run; stop them on Ctrl-C."""
    rt = runtime(params)
    backend, proxy = rt.get("backend"), rt.get("proxy")
    servers = [s for s in (proxy, backend) if s is not None]
    if not servers or not _backend_options(params)["keepalive"]:
        return
    log.info("Servers running, press Ctrl-C to stop")
    try:
        for s in servers:
            s.wait()
    except KeyboardInterrupt:
        log.info("Shutting down...")
    finally:
        for s in servers:
            s.stop()
