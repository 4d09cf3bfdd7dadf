from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Request

from core.catalog.models import Document
from core.errors import UnknownDocumentError
from core.index.store import DocumentStore
from router.common import get_index
from router.schemas import DocumentDetail, DocumentSummary, TagDocumentsResponse, TagsResponse


router = APIRouter()


def _summary(doc: Document) -> DocumentSummary:
    return DocumentSummary(
        id=doc.id,
        title=doc.title,
        description=doc.description,
        tags=list(doc.tags),
        kind=doc.kind,
    )


@router.get("/documents", response_model=List[DocumentSummary])
def list_documents(
    request: Request,
    tag: Optional[str] = Query(default=None, description="Only documents carrying this tag"),
    kind: Optional[str] = Query(default=None, description='"document" or "index"'),
) -> List[DocumentSummary]:
    """List catalog documents sorted by identifier."""

    catalog = get_index(request).catalog
    out: List[DocumentSummary] = []
    for doc in catalog:
        if tag and not doc.has_tag(tag):
            continue
        if kind and doc.kind != kind:
            continue
        out.append(_summary(doc))
    return out


@router.get("/documents/{doc_id:path}", response_model=DocumentDetail)
def get_document(
    request: Request,
    doc_id: str,
    content: bool = Query(default=False, description="Include the document text"),
) -> DocumentDetail:
    """Return one document record."""

    catalog = get_index(request).catalog
    doc = catalog.get(doc_id)
    if doc is None:
        raise HTTPException(status_code=404, detail=f"Unknown document: {doc_id}")

    text: Optional[str] = None
    if content:
        try:
            text = DocumentStore(request.app.state.root, catalog).load_content(doc.id)
        except UnknownDocumentError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e

    return DocumentDetail(
        **_summary(doc).model_dump(),
        see_also=list(doc.see_also),
        links=list(doc.links),
        external_links=list(doc.external_links),
        rules=len(doc.rules),
        content=text,
    )


@router.get("/tags", response_model=TagsResponse)
def list_tags(request: Request) -> TagsResponse:
    """Known tags with the number of documents carrying each."""

    return TagsResponse(tags=get_index(request).tags())


@router.get("/tags/{tag}", response_model=TagDocumentsResponse)
def documents_for_tag(request: Request, tag: str) -> TagDocumentsResponse:
    """Ordered recommended documents for a tag (empty list for unknown tags)."""

    index = get_index(request)
    return TagDocumentsResponse(tag=tag.strip().lstrip("#").lower(), documents=index.documents_for_tag(tag))
