from __future__ import annotations

import logging
from pathlib import Path

from flask import Flask, Response, send_from_directory


logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = "8000"
INDEX_FILE = "index.html"


class ServeError(Exception):
    """The preview server could not be started."""


def create_app(dist_dir: Path) -> Flask:
    """Flask app that serves the files under `dist_dir` as they are."""
    dist_dir = Path(dist_dir).resolve()
    app = Flask(__name__, static_folder=None)

    @app.route("/", defaults={"filename": ""})
    @app.route("/<path:filename>")
    def serve_file(filename: str) -> Response:
        if not filename or (dist_dir / filename).is_dir():
            filename = f"{filename.rstrip('/')}/{INDEX_FILE}".lstrip("/")
        return send_from_directory(dist_dir, filename)

    return app


def serve(dist_dir: Path, port: str = DEFAULT_PORT, host: str = DEFAULT_HOST) -> None:
    """Serve `dist_dir` until the process is stopped."""
    try:
        port_number = int(port)
    except ValueError as exc:
        msg = f"Invalid port: {port!r}"
        raise ServeError(msg) from exc
    if not 0 < port_number < 65536:
        msg = f"Port out of range: {port_number}"
        raise ServeError(msg)

    app = create_app(dist_dir)
    logger.info("Starting server at http://localhost:%s", port_number)
    logger.info("Serving from %s", dist_dir)
    logger.info("Press Ctrl+C to stop")
    try:
        # No reloader: the bundle is rebuilt explicitly.
        app.run(host=host, port=port_number, debug=False, use_reloader=False)
    except (OSError, SystemExit) as exc:
        # Werkzeug reports an address in use itself and exits with status 1.
        msg = f"Server error: {exc}"
        raise ServeError(msg) from exc
