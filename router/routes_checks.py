from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Request

from core.checks.integrity import run_checks
from router.common import get_index, load_state
from router.schemas import CheckRequest, CheckResponse, IssueModel, ReloadResponse


router = APIRouter()


@router.post("/checks", response_model=CheckResponse)
def checks(request: Request, req: Optional[CheckRequest] = None) -> CheckResponse:
    """Run the content-integrity checks over the loaded catalog."""

    index = get_index(request)
    external = req.external if req is not None else None
    report = run_checks(index.catalog, request.app.state.root, request.app.state.config, external=external)

    return CheckResponse(
        ok=report.ok,
        documents_checked=report.documents_checked,
        checks_run=report.checks_run,
        errors=len(report.errors),
        warnings=len(report.warnings),
        issues=[
            IssueModel(
                code=i.code,
                severity=i.severity,
                message=i.message,
                document=i.document,
                target=i.target,
                line=i.line,
            )
            for i in report.issues
        ],
    )


@router.post("/reload", response_model=ReloadResponse)
def reload(request: Request) -> ReloadResponse:
    """Re-scan the corpus root and replace the loaded catalog."""

    load_state(request.app)
    if request.app.state.startup_error:
        raise HTTPException(status_code=503, detail=f"Reload failed: {request.app.state.startup_error}")

    index = request.app.state.index
    return ReloadResponse(
        documents=len(index.catalog),
        index_files=len(index.catalog.index_files()),
        tags=len(index.tags()),
        loaded_at=getattr(request.app.state, "loaded_at", None),
    )
