"""
API — FEP query endpoints.

Blueprint: feps_bp
Prefix: /api
"""

from __future__ import annotations

import json

from flask import Blueprint, current_app, jsonify, request

from ..documents import FepNotFoundError, InvalidSlugError
from ..mirror import FileNotFoundInRepositoryError, NotInitializedError
from ..tools import ResourceError, ToolRegistry, UnknownToolError

feps_bp = Blueprint("feps", __name__)


def _registry() -> ToolRegistry:
    return current_app.config["TOOL_REGISTRY"]


def _error(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def _tool_response(name: str, arguments: dict):
    """Run a tool; successful results are JSON text, so decode them."""
    result = _registry().call_tool(name, arguments)
    if result.is_error:
        return _error(result.text, 400)
    return current_app.response_class(result.text, mimetype="application/json")


@feps_bp.route("/feps", methods=["GET"])
def api_list_feps():
    """List FEPs, optionally filtered by ?status=."""
    arguments = {}
    status = request.args.get("status")
    if status:
        arguments["status"] = status.upper()
    return _tool_response("list_feps", arguments)


@feps_bp.route("/feps/<slug>", methods=["GET"])
def api_get_fep(slug: str):
    """Get one FEP with its markdown body."""
    catalog = _registry().catalog
    try:
        document = catalog.get_fep(slug)
    except InvalidSlugError as e:
        return _error(str(e), 400)
    except (FepNotFoundError, FileNotFoundInRepositoryError) as e:
        return _error(str(e), 404)
    except NotInitializedError as e:
        return _error(str(e), 503)
    return jsonify(document.to_json_dict())


@feps_bp.route("/search", methods=["GET"])
def api_search():
    """Search FEPs by ?q=."""
    query = request.args.get("q", "").strip()
    if not query:
        return _error("Missing query parameter: q", 400)
    return _tool_response("search_feps", {"query": query})


@feps_bp.route("/tools", methods=["GET"])
def api_list_tools():
    """Tool and resource descriptors."""
    registry = _registry()
    return jsonify({"tools": registry.tools, "resources": registry.resources})


@feps_bp.route("/tools/<name>", methods=["POST"])
def api_call_tool(name: str):
    """Call a tool with the JSON request body as arguments."""
    arguments = request.get_json(silent=True) or {}
    if not isinstance(arguments, dict):
        return _error("Tool arguments must be a JSON object", 400)
    try:
        result = _registry().call_tool(name, arguments)
    except UnknownToolError as e:
        return _error(str(e), 404)
    return jsonify(result.to_dict())


@feps_bp.route("/resources", methods=["GET"])
def api_read_resource():
    """Read a resource by ?uri=fep://index or fep://{slug}."""
    uri = request.args.get("uri", "")
    if not uri:
        return _error("Missing query parameter: uri", 400)
    try:
        contents = _registry().read_resource(uri)
    except ResourceError as e:
        return _error(str(e), 404)
    data = contents.to_dict()
    data["contents"][0]["json"] = json.loads(contents.text)
    return jsonify(data)
