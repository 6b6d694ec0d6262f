"""
Documents — FEP index, front matter and search over the mirrored repository.
"""

from .catalog import FepCatalog
from .errors import DocumentError, FepNotFoundError, FrontmatterError, InvalidSlugError
from .frontmatter import ParsedDocument, parse_frontmatter
from .models import FepDocument, FepMetadata, FepSearchResult, FepStatus

__all__ = [
    "FepCatalog",
    "FepDocument",
    "FepMetadata",
    "FepSearchResult",
    "FepStatus",
    "ParsedDocument",
    "parse_frontmatter",
    "DocumentError",
    "FepNotFoundError",
    "FrontmatterError",
    "InvalidSlugError",
]
