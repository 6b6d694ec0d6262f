"""
Tools & Resources — The FEP query surface.

Each tool has a JSON-schema descriptor (name, description, inputSchema)
and a handler. Handlers never raise: failures come back as a ToolResult
with is_error=True and an "Error: ..." text block. Resources raise
ResourceError instead, since a resource read has no error channel.

## Usage

    registry = ToolRegistry(catalog)
    result = registry.call_tool("get_fep", {"slug": "a4ed"})
    print(result.text)

    resource = registry.read_resource("fep://index")
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .documents import FepCatalog
from .documents.catalog import validate_slug
from .documents.models import STATUSES

logger = logging.getLogger(__name__)

INDEX_URI = "fep://index"
_FEP_URI_RE = re.compile(r"^fep://([0-9a-f]{4})$")

REFRESH_OK_TEXT = "FEP repository refreshed successfully."

# ── Tool definitions ─────────────────────────────────────────

TOOLS: List[Dict[str, Any]] = [
    {
        "name": "list_feps",
        "description": "List all Fediverse Enhancement Proposals with their metadata",
        "inputSchema": {
            "type": "object",
            "properties": {
                "status": {
                    "type": "string",
                    "enum": list(STATUSES),
                    "description": "Filter by FEP status",
                },
            },
        },
    },
    {
        "name": "get_fep",
        "description": "Get a specific FEP document by its slug identifier",
        "inputSchema": {
            "type": "object",
            "properties": {
                "slug": {
                    "type": "string",
                    "pattern": "^[0-9a-f]{4}$",
                    "description": "The 4-character hex FEP identifier (e.g., 'a4ed')",
                },
            },
            "required": ["slug"],
        },
    },
    {
        "name": "search_feps",
        "description": "Search FEPs by title, author, or content",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query"},
            },
            "required": ["query"],
        },
    },
    {
        "name": "refresh_repository",
        "description": "Pull the latest FEP documents from the repository",
        "inputSchema": {"type": "object", "properties": {}},
    },
]

RESOURCES: List[Dict[str, Any]] = [
    {
        "uri": INDEX_URI,
        "description": "The complete FEP index with metadata for all Fediverse Enhancement Proposals",
        "mimeType": "application/json",
    },
    {
        "uriTemplate": "fep://{slug}",
        "description": "A specific FEP document by its slug identifier",
        "mimeType": "application/json",
    },
]


class UnknownToolError(KeyError):
    """No tool is registered under that name."""

    def __str__(self) -> str:
        return f"Unknown tool: {self.args[0]}"


class ResourceError(Exception):
    """A resource could not be read."""


class ToolArgumentError(ValueError):
    """Tool arguments failed validation."""


@dataclass
class ToolResult:
    """Text content returned by a tool call."""

    content: List[Dict[str, str]] = field(default_factory=list)
    is_error: bool = False

    @classmethod
    def text_result(cls, text: str, is_error: bool = False) -> "ToolResult":
        return cls(content=[{"type": "text", "text": text}], is_error=is_error)

    @property
    def text(self) -> str:
        return "\n".join(block.get("text", "") for block in self.content)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"content": self.content}
        if self.is_error:
            result["isError"] = True
        return result


@dataclass
class ResourceContents:
    uri: str
    text: str
    mime_type: str = "application/json"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contents": [
                {"uri": self.uri, "mimeType": self.mime_type, "text": self.text},
            ]
        }


def _dumps(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


class ToolRegistry:
    """Dispatches tool calls and resource reads to the catalog."""

    def __init__(self, catalog: FepCatalog):
        self.catalog = catalog
        self._handlers: Dict[str, Callable[[Dict[str, Any]], str]] = {
            "list_feps": self._list_feps,
            "get_fep": self._get_fep,
            "search_feps": self._search_feps,
            "refresh_repository": self._refresh_repository,
        }

    @property
    def tools(self) -> List[Dict[str, Any]]:
        return TOOLS

    @property
    def resources(self) -> List[Dict[str, Any]]:
        return RESOURCES

    def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        """Run a tool. Raises UnknownToolError for an unregistered name."""
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownToolError(name)

        try:
            text = handler(arguments or {})
        except Exception as e:
            logger.warning(f"[tools] {name} failed: {e}")
            return ToolResult.text_result(f"Error: {e}", is_error=True)
        return ToolResult.text_result(text)

    # ── Tool handlers ────────────────────────────────────────

    def _list_feps(self, args: Dict[str, Any]) -> str:
        status = args.get("status")
        if status is not None and status not in STATUSES:
            raise ToolArgumentError(
                f"Invalid status {status!r}, expected one of {', '.join(STATUSES)}"
            )

        feps = self.catalog.list_feps(status=status)
        result = []
        for fep in feps:
            data = fep.to_json_dict()
            result.append({
                key: data[key]
                for key in (
                    "slug", "title", "status", "authors",
                    "dateReceived", "dateFinalized", "dateWithdrawn",
                )
                if key in data
            })
        return _dumps(result)

    def _get_fep(self, args: Dict[str, Any]) -> str:
        slug = args.get("slug")
        if not slug:
            raise ToolArgumentError("Missing required argument: slug")
        document = self.catalog.get_fep(validate_slug(slug))
        return _dumps(document.to_json_dict())

    def _search_feps(self, args: Dict[str, Any]) -> str:
        query = args.get("query")
        if not isinstance(query, str) or not query.strip():
            raise ToolArgumentError("Missing required argument: query")
        results = self.catalog.search(query)
        return _dumps([r.to_json_dict() for r in results])

    def _refresh_repository(self, args: Dict[str, Any]) -> str:
        self.catalog.mirror.refresh()
        return REFRESH_OK_TEXT

    # ── Resources ────────────────────────────────────────────

    def read_resource(self, uri: str) -> ResourceContents:
        """Read fep://index or fep://{slug}."""
        if uri == INDEX_URI:
            try:
                index = self.catalog.load_index()
            except Exception as e:
                raise ResourceError(f"Failed to load FEP index: {e}") from e
            return ResourceContents(uri=uri, text=_dumps([f.to_json_dict() for f in index]))

        try:
            match = _FEP_URI_RE.match(uri)
            if not match:
                raise ValueError(
                    f"Invalid FEP URI: {uri}. Expected format: fep://{{4-char-hex-slug}}"
                )
            document = self.catalog.get_fep(match.group(1))
        except Exception as e:
            raise ResourceError(f"Failed to load FEP: {e}") from e
        return ResourceContents(uri=uri, text=_dumps(document.to_json_dict()))
