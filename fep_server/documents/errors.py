"""
Document errors.
"""

from __future__ import annotations


class DocumentError(Exception):
    """Base exception for FEP document errors."""


class FrontmatterError(DocumentError):
    """A document has no parseable YAML front matter."""


class FepNotFoundError(DocumentError):
    """The slug is not listed in index.json."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"FEP not found: {slug}")


class InvalidSlugError(DocumentError):
    """The slug is not a 4-character lowercase hex identifier."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(
            f"Invalid FEP slug: {slug!r}. Expected a 4-character hex identifier (e.g. 'a4ed')"
        )
