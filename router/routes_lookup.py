from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Request

from core.errors import UnknownDocumentError
from core.index.store import DocumentStore
from router.common import get_index
from router.schemas import LookupRequest, LookupResponse, LookupResultModel, RuleModel


router = APIRouter()


@router.post("/lookup", response_model=LookupResponse)
def lookup(request: Request, req: LookupRequest) -> LookupResponse:
    """Map a task description or tag to an ordered list of documents."""

    index = get_index(request)
    config = request.app.state.config
    limit = req.limit if req.limit is not None else int(config.lookup_limit)

    hits = index.resolve(req.query, limit=limit, include_related=req.include_related)

    contents = {}
    if req.include_content and hits:
        store = DocumentStore(request.app.state.root, index.catalog)
        try:
            contents = dict(store.load_contents(h.id for h in hits))
        except UnknownDocumentError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e

    results: List[LookupResultModel] = []
    for hit in hits:
        results.append(
            LookupResultModel(
                id=hit.id,
                title=hit.title,
                description=hit.description,
                score=hit.score,
                matched_tags=hit.matched_tags,
                entries=hit.entries,
                related_to=hit.related_to,
                content=contents.get(hit.id),
            )
        )
    return LookupResponse(query=req.query, results=results)


@router.get("/rules", response_model=List[RuleModel])
def rules(
    request: Request,
    topic: Optional[str] = Query(default=None, description="Only directives for this topic"),
) -> List[RuleModel]:
    """Rule directives collected from every document."""

    return [
        RuleModel(
            topic=r.topic,
            name=r.name,
            description=r.description,
            document=r.document,
            line=r.line,
            directive=r.render(),
        )
        for r in get_index(request).rules(topic)
    ]
