from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
def health(request: Request) -> Dict[str, Any]:
    """Lightweight health/status endpoint."""

    config = getattr(request.app.state, "config", None)
    catalog = getattr(request.app.state, "catalog", None)
    index = getattr(request.app.state, "index", None)

    return {
        "status": "ok",
        "config_path": getattr(request.app.state, "config_path", "prompt-catalog.yaml"),
        "debug_level": getattr(config, "debug_level", "INFO"),
        "docs_root": str(getattr(request.app.state, "root", getattr(config, "docs_root", "./"))),
        "startup_error": getattr(request.app.state, "startup_error", None),
        "loaded_at": getattr(request.app.state, "loaded_at", None),
        "documents_loaded": len(catalog) if catalog is not None else 0,
        "index_files_loaded": len(catalog.index_files()) if catalog is not None else 0,
        "tags_loaded": len(index.tags()) if index is not None else 0,
        "check_external_links": bool(getattr(config, "check_external_links", False)),
    }
