from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from core.catalog.models import Catalog
from core.errors import UnknownDocumentError

logger = logging.getLogger(__name__)


class DocumentStore:
    """Read-only access to the text of catalog documents."""

    def __init__(self, root: Union[str, Path], catalog: Catalog) -> None:
        self.root = Path(root)
        self.catalog = catalog

    def path_for(self, doc_id: str) -> Path:
        doc = self.catalog.require(doc_id)
        if doc.path:
            return Path(doc.path)
        return self.root / doc.id

    def load_content(self, doc_id: str) -> str:
        path = self.path_for(doc_id)
        try:
            return path.read_text(encoding="utf-8-sig")
        except FileNotFoundError as e:
            raise UnknownDocumentError(doc_id) from e

    def load_contents(self, doc_ids: Iterable[str]) -> List[Tuple[str, str]]:
        """Return ordered (id, text) pairs, each document once.

        Raises:
            UnknownDocumentError: If an identifier is not in the catalog.
        """

        out: List[Tuple[str, str]] = []
        seen = set()
        for doc_id in doc_ids:
            if doc_id in seen:
                continue
            seen.add(doc_id)
            out.append((doc_id, self.load_content(doc_id)))
        logger.debug("Loaded %d documents", len(out))
        return out
