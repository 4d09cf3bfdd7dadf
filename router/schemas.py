from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class DocumentSummary(BaseModel):
    """Catalog listing entry."""

    id: str
    title: str
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    kind: str = "document"


class DocumentDetail(DocumentSummary):
    """Full document record, optionally with its text."""

    see_also: List[str] = Field(default_factory=list)
    links: List[str] = Field(default_factory=list)
    external_links: List[str] = Field(default_factory=list)
    rules: int = 0
    content: Optional[str] = None


class TagDocumentsResponse(BaseModel):
    tag: str
    documents: List[str]


class LookupRequest(BaseModel):
    """Map a task description (or a single tag) to recommended documents."""

    query: str = Field(..., min_length=1)
    limit: Optional[int] = Field(
        default=None,
        ge=1,
        le=50,
        description="Maximum number of documents. Defaults to config.lookup_limit.",
    )
    include_related: bool = Field(
        default=False,
        description="If true, appends the See Also neighbours of every hit.",
    )
    include_content: bool = Field(
        default=False,
        description="If true, returns the text of each recommended document.",
    )


class LookupResultModel(BaseModel):
    id: str
    title: str
    description: str = ""
    score: int = 0
    matched_tags: List[str] = Field(default_factory=list)
    entries: List[str] = Field(default_factory=list)
    related_to: Optional[str] = None
    content: Optional[str] = None


class LookupResponse(BaseModel):
    query: str
    results: List[LookupResultModel]


class RuleModel(BaseModel):
    topic: str
    name: str
    description: str
    document: str
    line: int
    directive: str


class CheckRequest(BaseModel):
    external: Optional[bool] = Field(
        default=None,
        description="Check absolute http(s) links. Defaults to config.check_external_links.",
    )


class IssueModel(BaseModel):
    code: str
    severity: str
    message: str
    document: Optional[str] = None
    target: Optional[str] = None
    line: Optional[int] = None


class CheckResponse(BaseModel):
    ok: bool
    documents_checked: int
    checks_run: List[str]
    errors: int
    warnings: int
    issues: List[IssueModel]


class ReloadResponse(BaseModel):
    documents: int
    index_files: int
    tags: int
    loaded_at: Optional[str] = None


class TagsResponse(BaseModel):
    tags: Dict[str, int]
