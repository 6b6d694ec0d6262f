"""
Local API Server — Flask app serving the FEP corpus.

The app does not own the mirror's lifecycle; run_server() does:
it clones on startup, tears down on exit or SIGINT/SIGTERM.
"""

from __future__ import annotations

import logging
import signal
import sys
import time
from typing import Optional

from flask import Flask, jsonify, request

from ..documents import FepCatalog
from ..mirror import CloneFailedError, RepositoryMirror
from ..tools import ToolRegistry
from .routes_feps import feps_bp
from .routes_mirror import mirror_bp

logger = logging.getLogger(__name__)


def create_app(mirror: RepositoryMirror, catalog: Optional[FepCatalog] = None) -> Flask:
    """Create the Flask application around an existing mirror."""
    app = Flask(__name__)

    catalog = catalog or FepCatalog(mirror)
    app.config["MIRROR"] = mirror
    app.config["TOOL_REGISTRY"] = ToolRegistry(catalog)
    app.json.sort_keys = False

    # ── Register Blueprints ───────────────────────────────────────
    app.register_blueprint(feps_bp, url_prefix="/api")            # /api/feps, /api/search, ...
    app.register_blueprint(mirror_bp, url_prefix="/api/mirror")   # /api/mirror/*

    # ── Error Handlers ────────────────────────────────────────────

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"success": False, "error": "Not found"}), 404

    @app.errorhandler(500)
    def internal_server_error(e):
        """Return JSON for any unhandled 500 so clients never see raw HTML."""
        logger.error(f"[api] Unhandled 500 on {request.method} {request.path}: {e}")
        return jsonify({
            "success": False,
            "error": f"Internal server error: {str(e)}",
        }), 500

    # ── Request Logging ───────────────────────────────────────────

    @app.before_request
    def log_request_start():
        request._start_time = time.time()

    @app.after_request
    def log_request_end(response):
        duration_ms = 0
        if hasattr(request, "_start_time"):
            duration_ms = int((time.time() - request._start_time) * 1000)

        # Status polling is noisy
        log_fn = logger.debug if request.path.endswith("/status") else logger.info
        log_fn(f"[api] {request.method} {request.path} → {response.status_code} ({duration_ms}ms)")
        return response

    return app


def run_server(
    host: str = "127.0.0.1",
    port: int = 5060,
    debug: bool = False,
    mirror: Optional[RepositoryMirror] = None,
) -> None:
    """
    Clone the repository and serve the API until interrupted.

    A failed clone is fatal: without a working copy no query can succeed.
    """
    mirror = mirror or RepositoryMirror.from_env()

    try:
        repo_path = mirror.initialize()
    except CloneFailedError as e:
        logger.error(f"[api] Failed to initialize FEP repository: {e}")
        sys.exit(1)
    logger.info(f"[api] FEP repository initialized at {repo_path}")

    def shutdown(signum, frame):
        logger.info("[api] Shutting down...")
        mirror.teardown()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    app = create_app(mirror)
    logger.info(f"[api] Serving on http://{host}:{port}")
    try:
        app.run(host=host, port=port, debug=debug, use_reloader=False, threaded=True)
    finally:
        mirror.teardown()
