"""Backend server: serves the output root on a fixed local port.

The live-reload proxy forwards every browser request here, so this is the
process that actually answers for `dist/`.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Iterable, Optional

from flask import Flask, abort, send_from_directory
from flask_cors import CORS
from werkzeug.serving import make_server

from ..orchestrator.errors import ServerStartError
from ..orchestrator.logging import get_logger

INDEX_FILES = ("index.html", "index.htm")

log = get_logger("assetpipe.backend")


def serve_path(root: Path, path: str):
    """Send a file under `root`, resolving directories to their index file."""
    target = root / path
    if target.is_dir():
        for name in INDEX_FILES:
            if (target / name).is_file():
                return send_from_directory(root, (Path(path) / name).as_posix())
        abort(404)
    return send_from_directory(root, path)


def create_app(root: str | Path, cors_origins: Optional[Iterable[str]] = None) -> Flask:
    root = Path(root).resolve()
    app = Flask(__name__, static_folder=None)

    # Pages come back through the proxy origin
    CORS(app, resources={r"/*": {"origins": list(cors_origins) if cors_origins else "*"}})

    @app.route("/", defaults={"path": ""})
    @app.route("/<path:path>")
    def serve(path):
        return serve_path(root, path)

    return app


class BackendServer:
    def __init__(
        self,
        root: str | Path,
        host: str = "127.0.0.1",
        port: int = 8010,
        cors_origins: Optional[Iterable[str]] = None,
    ):
        self.root = Path(root)
        self.host = host
        self.port = port
        self.app = create_app(self.root, cors_origins)
        self._server = None
        self._thread: Optional[threading.Thread] = None

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def start(self) -> None:
        """Bind the port and serve on a background thread.

        Returns only once the socket is listening.
        """
        try:
            self._server = make_server(self.host, self.port, self.app, threaded=True)
        except (OSError, SystemExit) as e:
            # werkzeug exits rather than raising when the address is in use
            raise ServerStartError(f"Backend could not bind {self.url}: {e}") from e
        self.port = self._server.server_port
        self._thread = threading.Thread(
            target=self._server.serve_forever, name="assetpipe-backend", daemon=True
        )
        self._thread.start()
        log.info("Backend serving %s on %s", self.root, self.url)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def wait(self) -> None:
        while self.running:
            self._thread.join(0.5)

    def stop(self) -> None:
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join()
        self._server = None
        log.info("Backend stopped")
