"""
Front Matter — Parse the YAML header of a FEP markdown document.

FEP documents start with YAML between `---` markers:

    ---
    slug: "a4ed"
    authors: Author Name <email@example.com>
    status: FINAL
    dateReceived: 2020-10-16
    ---
    # FEP-a4ed: Title

    Content here...
"""

from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from typing import Any, Optional

import yaml

from .errors import FrontmatterError
from .models import FepMetadata, normalize_status

_FRONTMATTER_RE = re.compile(r"^---\r?\n([\s\S]*?)\r?\n---\r?\n([\s\S]*)$")
_FEP_TITLE_RE = re.compile(r"^#\s+FEP-[0-9a-f]{4}:\s*(.+)$", re.MULTILINE)
_HEADING_RE = re.compile(r"^#\s+(.+)$", re.MULTILINE)


@dataclass
class ParsedDocument:
    """Normalized metadata and the markdown body without front matter."""

    metadata: FepMetadata
    body: str


def format_date(value: Any) -> Optional[str]:
    """Render a YAML date as YYYY-MM-DD; strings pass through unchanged."""
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.date().isoformat()
    if isinstance(value, dt.date):
        return value.isoformat()
    return str(value)


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def extract_title(body: str, slug: str) -> str:
    """Title from the first `# FEP-xxxx:` heading, else any heading, else FEP-<slug>."""
    match = _FEP_TITLE_RE.search(body)
    if match:
        return match.group(1).strip()
    match = _HEADING_RE.search(body)
    if match:
        return match.group(1).strip()
    return f"FEP-{slug}"


def parse_frontmatter(content: str, title_from_index: Optional[str] = None) -> ParsedDocument:
    """
    Parse a FEP document into metadata and body.

    Args:
        content: The full markdown document
        title_from_index: Title from index.json, preferred over headings

    Raises:
        FrontmatterError: If the document has no YAML front matter
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        raise FrontmatterError("Invalid FEP document: missing YAML frontmatter")

    yaml_content, body = match.group(1), match.group(2)

    try:
        parsed = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        raise FrontmatterError(f"Invalid FEP document: malformed YAML frontmatter: {e}") from e
    if not isinstance(parsed, dict):
        raise FrontmatterError("Invalid FEP document: frontmatter is not a mapping")

    slug = str(parsed.get("slug", ""))
    title = title_from_index or extract_title(body, slug)

    metadata = FepMetadata(
        slug=slug,
        title=title,
        authors=str(parsed.get("authors") or ""),
        status=normalize_status(parsed.get("status")),
        date_received=format_date(parsed.get("dateReceived")) or "",
        date_finalized=format_date(parsed.get("dateFinalized")),
        date_withdrawn=format_date(parsed.get("dateWithdrawn")),
        tracking_issue=_optional_str(parsed.get("trackingIssue")),
        discussions_to=_optional_str(parsed.get("discussionsTo")),
    )

    return ParsedDocument(metadata=metadata, body=body)
