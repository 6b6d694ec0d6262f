"""
FEP Catalog — Index lookups, document loading and search.

The catalog never touches the filesystem directly; every read goes
through the RepositoryMirror so path checks and locking apply.

## Usage

    catalog = FepCatalog(mirror)
    for fep in catalog.list_feps(status="FINAL"):
        print(fep.slug, fep.title)
    doc = catalog.get_fep("a4ed")
"""

from __future__ import annotations

import json
import logging
import re
from typing import List, Optional

from pydantic import ValidationError

from ..mirror import MirrorError, RepositoryMirror
from .errors import DocumentError, FepNotFoundError, InvalidSlugError
from .frontmatter import parse_frontmatter
from .models import FepDocument, FepMetadata, FepSearchResult
from .search import calculate_score, get_snippet

logger = logging.getLogger(__name__)

INDEX_PATH = "index.json"
SLUG_RE = re.compile(r"^[0-9a-f]{4}$")

TITLE_WEIGHT = 3
AUTHOR_WEIGHT = 2
DEFAULT_SEARCH_LIMIT = 20


def validate_slug(slug: str) -> str:
    """Return the slug if it is 4 lowercase hex chars, else raise."""
    if not isinstance(slug, str) or not SLUG_RE.match(slug):
        raise InvalidSlugError(str(slug))
    return slug


def document_path(slug: str) -> str:
    """Repository-relative path of a FEP's markdown file."""
    return f"fep/{slug}/fep-{slug}.md"


class FepCatalog:
    """Read-only view of the FEP corpus in a mirror."""

    def __init__(self, mirror: RepositoryMirror):
        self.mirror = mirror

    def _read_text(self, relative_path: str) -> str:
        try:
            return self.mirror.read_file(relative_path)
        except UnicodeDecodeError as e:
            raise DocumentError(f"{relative_path} is not valid UTF-8: {e}") from e

    def load_index(self) -> List[FepMetadata]:
        """Parse index.json into metadata entries."""
        content = self._read_text(INDEX_PATH)
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise DocumentError(f"Invalid {INDEX_PATH}: {e}") from e
        if not isinstance(data, list):
            raise DocumentError(f"Invalid {INDEX_PATH}: expected a list of FEPs")
        try:
            return [FepMetadata.model_validate(entry) for entry in data]
        except ValidationError as e:
            raise DocumentError(
                f"Invalid {INDEX_PATH}: {e.error_count()} bad field(s) in FEP entries"
            ) from e

    def list_feps(self, status: Optional[str] = None) -> List[FepMetadata]:
        """All index entries, optionally restricted to one status."""
        index = self.load_index()
        if status:
            return [fep for fep in index if fep.status == status]
        return index

    def get_fep(self, slug: str) -> FepDocument:
        """Load one FEP, merging front matter with the index entry."""
        validate_slug(slug)
        index = self.load_index()
        entry = next((fep for fep in index if fep.slug == slug), None)
        if entry is None:
            raise FepNotFoundError(slug)

        content = self._read_text(document_path(slug))
        parsed = parse_frontmatter(content, entry.title)

        # index.json is authoritative for title and implementations
        metadata = parsed.metadata.model_copy(
            update={"title": entry.title, "implementations": entry.implementations}
        )
        return FepDocument(metadata=metadata, content=parsed.body)

    def _read_document(self, slug: str) -> Optional[str]:
        try:
            return self._read_text(document_path(slug))
        except (MirrorError, DocumentError, OSError) as e:
            logger.debug(f"[catalog] Skipping content of {slug}: {e}", extra={"slug": slug})
            return None

    def search(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> List[FepSearchResult]:
        """Rank FEPs by title, author and content matches."""
        results: List[FepSearchResult] = []

        for fep in self.load_index():
            score = calculate_score(fep.title, query) * TITLE_WEIGHT
            score += calculate_score(fep.authors, query) * AUTHOR_WEIGHT

            snippet = None
            content = self._read_document(fep.slug)
            if content is not None:
                content_score = calculate_score(content, query)
                if content_score > 0:
                    score += content_score
                    snippet = get_snippet(content, query)

            if score > 0:
                results.append(FepSearchResult(fep=fep, score=score, snippet=snippet))

        results.sort(key=lambda r: r.score, reverse=True)
        logger.debug(f"[catalog] Search {query!r}: {len(results)} match(es)")
        return results[:limit]
