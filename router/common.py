from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request

from core.catalog.loader import load_catalog
from core.index.lookup import CatalogIndex

logger = logging.getLogger(__name__)


def load_state(app: FastAPI) -> None:
    """(Re)load the catalog into `app.state`.

    A failed load keeps the app bootable: the error is stored in
    `app.state.startup_error` and data endpoints answer 503.
    """

    config = app.state.config
    root = app.state.root

    try:
        catalog = load_catalog(root, config)
    except Exception as e:
        logger.exception("Failed to load catalog from %s", root)
        app.state.startup_error = str(e)
        app.state.catalog = None
        app.state.index = None
        return

    app.state.catalog = catalog
    app.state.index = CatalogIndex(catalog)
    app.state.loaded_at = datetime.now(timezone.utc).isoformat()
    app.state.startup_error = None


def get_index(request: Request) -> CatalogIndex:
    """Return the loaded CatalogIndex or raise 503.

    Raises:
        HTTPException: If the catalog failed to load.
    """

    if getattr(request.app.state, "startup_error", None):
        raise HTTPException(
            status_code=503, detail=f"Startup failed: {request.app.state.startup_error}"
        )
    index = getattr(request.app.state, "index", None)
    if index is None:
        raise HTTPException(status_code=503, detail="Catalog is not loaded")
    return index
