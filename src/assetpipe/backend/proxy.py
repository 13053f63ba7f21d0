"""Browser-facing live-reload proxy.

A small Flask app forwards every request to the backend and falls back to
files from the output root when the backend is down or has nothing at that
path. livereload wraps the app, injects its client script into HTML pages,
and owns the file-watch loop.
"""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from typing import Callable, Optional

import requests
from flask import Flask, Response, request
from livereload import Server
from tornado.ioloop import IOLoop
from werkzeug.exceptions import NotFound

from ..orchestrator.errors import ServerStartError
from ..orchestrator.logging import get_logger
from .server import serve_path

METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

# Not forwarded: requests already decoded the body and the WSGI server
# frames the response itself.
EXCLUDED_HEADERS = {
    "connection",
    "content-encoding",
    "content-length",
    "keep-alive",
    "transfer-encoding",
}

log = get_logger("assetpipe.proxy")


def create_proxy_app(target: str, root: str | Path) -> Flask:
    root = Path(root).resolve()
    target = target.rstrip("/")
    app = Flask(__name__, static_folder=None)
    session = requests.Session()
    # Local backend only; never route through HTTP_PROXY
    session.trust_env = False

    def fallback(path: str):
        return serve_path(root, path)

    @app.route("/", defaults={"path": ""}, methods=METHODS)
    @app.route("/<path:path>", methods=METHODS)
    def proxy(path):
        url = f"{target}/{path}"
        if request.query_string:
            url = f"{url}?{request.query_string.decode('latin-1')}"
        headers = {k: v for k, v in request.headers if k.lower() != "host"}
        try:
            upstream = session.request(
                request.method,
                url,
                headers=headers,
                data=request.get_data(),
                allow_redirects=False,
            )
        except requests.ConnectionError:
            log.warning("Backend unreachable at %s, serving /%s from %s", target, path, root)
            return fallback(path)

        if upstream.status_code == 404 and request.method in ("GET", "HEAD"):
            try:
                return fallback(path)
            except NotFound:
                pass

        out_headers = [
            (k, v) for k, v in upstream.headers.items() if k.lower() not in EXCLUDED_HEADERS
        ]
        return Response(upstream.content, upstream.status_code, out_headers)

    return app


class LiveReloadProxy:
    def __init__(
        self,
        app: Flask,
        root: str | Path,
        host: str = "127.0.0.1",
        port: int = 3000,
        open_browser: bool = True,
        restart_delay: int = 2,
        server: Optional[Server] = None,
    ):
        self.root = Path(root)
        self.host = host
        self.port = port
        self.open_browser = open_browser
        self.restart_delay = restart_delay
        self.server = server if server is not None else Server(app=app)
        self._ioloop: Optional[IOLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()
        self._error: Optional[BaseException] = None

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def watch(
        self,
        path: str,
        func: Optional[Callable[[], None]] = None,
        delay: Optional[float] = None,
        ignore: Optional[Callable[[str], bool]] = None,
    ) -> None:
        """Register a watch; a `func` of None only reloads the browser."""
        if self._ioloop is not None:
            # The watcher is polled from the loop thread
            self._ioloop.add_callback(self.server.watch, path, func, delay, ignore)
        else:
            self.server.watch(path, func, delay, ignore)

    def _serve(self) -> None:
        asyncio.set_event_loop(asyncio.new_event_loop())
        self._ioloop = IOLoop.current()
        # Runs once the loop starts, i.e. after the port is bound
        self._ioloop.add_callback(self._ready.set)
        try:
            self.server.serve(
                port=self.port,
                host=self.host,
                root=str(self.root),
                open_url_delay=0 if self.open_browser else None,
                restart_delay=self.restart_delay,
            )
        except Exception as e:  # noqa: BLE001
            self._error = e
            log.exception("Live-reload proxy stopped")
        finally:
            self._ready.set()

    def start(self) -> None:
        self._thread = threading.Thread(
            target=self._serve, name="assetpipe-livereload", daemon=True
        )
        self._thread.start()
        self._ready.wait()
        if self._error is not None:
            raise ServerStartError(
                f"Live-reload proxy could not start on {self.url}: {self._error}"
            ) from self._error
        log.info("Live-reload proxy on %s, serving %s", self.url, self.root)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def wait(self) -> None:
        while self.running:
            self._thread.join(0.5)

    def stop(self) -> None:
        if self._ioloop is not None and self.running:
            self._ioloop.add_callback(self._ioloop.stop)
            self._thread.join()
        log.info("Live-reload proxy stopped")
