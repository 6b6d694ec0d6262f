"""
FEP Models — Pydantic schemas for index entries, documents and search hits.

Field aliases follow the camelCase keys of the repository's index.json,
so entries load with model_validate() and dump back with to_json_dict().
"""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

FepStatus = Literal["DRAFT", "FINAL", "WITHDRAWN"]

STATUSES = ("DRAFT", "FINAL", "WITHDRAWN")


def normalize_status(value: Any) -> str:
    """Upper-case a status; anything unrecognised becomes DRAFT."""
    normalized = str(value or "").strip().upper()
    if normalized in STATUSES:
        return normalized
    return "DRAFT"


class FepMetadata(BaseModel):
    """Metadata for one Fediverse Enhancement Proposal."""

    model_config = ConfigDict(populate_by_name=True)

    slug: str
    title: str = ""
    authors: str = ""
    status: FepStatus = "DRAFT"
    date_received: str = Field(default="", alias="dateReceived")
    date_finalized: Optional[str] = Field(default=None, alias="dateFinalized")
    date_withdrawn: Optional[str] = Field(default=None, alias="dateWithdrawn")
    tracking_issue: Optional[str] = Field(default=None, alias="trackingIssue")
    discussions_to: Optional[str] = Field(default=None, alias="discussionsTo")
    implementations: Optional[int] = None

    @field_validator("slug", mode="before")
    @classmethod
    def _coerce_slug(cls, value: Any) -> str:
        # YAML reads an all-digit slug such as 1234 as an int
        return str(value)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> str:
        return normalize_status(value)

    def to_json_dict(self) -> Dict[str, Any]:
        """camelCase dict with unset optional fields dropped."""
        return self.model_dump(by_alias=True, exclude_none=True)


class FepDocument(BaseModel):
    """A complete FEP: metadata plus the markdown body."""

    metadata: FepMetadata
    content: str

    def to_json_dict(self) -> Dict[str, Any]:
        return {"metadata": self.metadata.to_json_dict(), "content": self.content}


class FepSearchResult(BaseModel):
    """One search hit."""

    fep: FepMetadata
    score: int
    snippet: Optional[str] = None

    def to_json_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"fep": self.fep.to_json_dict(), "score": self.score}
        if self.snippet is not None:
            result["snippet"] = self.snippet
        return result
