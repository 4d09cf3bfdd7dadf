from __future__ import annotations


class CatalogError(ValueError):
    """Base class for catalog loading and lookup errors."""


class DocumentParseError(CatalogError):
    """Raised when an instruction file cannot be parsed (e.g. invalid front matter)."""

    def __init__(self, doc_id: str, reason: str) -> None:
        super().__init__(f"{doc_id}: {reason}")
        self.doc_id = doc_id
        self.reason = reason


class DuplicateDocumentError(CatalogError):
    """Raised when two documents share the same identifier."""

    def __init__(self, doc_id: str) -> None:
        super().__init__(f"Duplicate document identifier: {doc_id}")
        self.doc_id = doc_id


class UnknownDocumentError(CatalogError, KeyError):
    """Raised when a document identifier is not part of the catalog."""

    def __init__(self, doc_id: str) -> None:
        super().__init__(f"Unknown document: {doc_id}")
        self.doc_id = doc_id

    def __str__(self) -> str:
        return f"Unknown document: {self.doc_id}"
