"""
API — Mirror status and refresh endpoints.

Blueprint: mirror_bp
Prefix: /api/mirror
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ..mirror import FetchFailedError, NotInitializedError, RepositoryMirror

mirror_bp = Blueprint("mirror", __name__)


def _mirror() -> RepositoryMirror:
    return current_app.config["MIRROR"]


@mirror_bp.route("/status", methods=["GET"])
def api_mirror_status():
    """Phase, path, HEAD and last sync of the working copy."""
    return jsonify(_mirror().status())


@mirror_bp.route("/refresh", methods=["POST"])
def api_mirror_refresh():
    """Fetch and fast-forward from origin."""
    mirror = _mirror()
    try:
        mirror.refresh()
    except NotInitializedError as e:
        return jsonify({"success": False, "error": str(e)}), 409
    except FetchFailedError as e:
        return jsonify({"success": False, "error": str(e)}), 502
    return jsonify({"success": True, "head": mirror.head_commit()})
