from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from core.errors import DuplicateDocumentError, UnknownDocumentError


DOCUMENT_KIND = "document"
INDEX_KIND = "index"


def normalize_tag(tag: str) -> str:
    """Normalize a tag label: `" #FastAPI "` -> `"fastapi"`."""

    return str(tag or "").strip().lstrip("#").strip().lower()


@dataclass(frozen=True)
class RuleDirective:
    """A single-line `@topic Rule - Name: Description` hint."""

    topic: str
    name: str
    description: str
    document: str
    line: int

    def render(self) -> str:
        return f"@{self.topic} Rule - {self.name}: {self.description}"


@dataclass(frozen=True)
class MalformedRule:
    """A line that looks like a rule directive but does not follow the grammar."""

    document: str
    line: int
    text: str


@dataclass(frozen=True)
class IndexEntry:
    """One section of an index file: tags -> ordered recommended documents."""

    title: str
    source: str
    tags: Tuple[str, ...] = ()
    description: str = ""
    documents: Tuple[str, ...] = ()


@dataclass
class Document:
    """Represents one parsed instruction file."""

    id: str
    title: str
    description: str = ""
    tags: List[str] = field(default_factory=list)
    see_also: List[str] = field(default_factory=list)
    kind: str = DOCUMENT_KIND

    # Derived from the body.
    links: List[str] = field(default_factory=list)
    external_links: List[str] = field(default_factory=list)
    rules: List[RuleDirective] = field(default_factory=list)
    malformed_rules: List[MalformedRule] = field(default_factory=list)
    entries: List[IndexEntry] = field(default_factory=list)

    body: str = ""
    path: Optional[str] = None

    @property
    def is_index(self) -> bool:
        return self.kind == INDEX_KIND

    def has_tag(self, tag: str) -> bool:
        return normalize_tag(tag) in self.tags


class Catalog:
    """Immutable collection of documents keyed by identifier."""

    def __init__(self, documents: Iterable[Document]) -> None:
        by_id: Dict[str, Document] = {}
        for doc in documents:
            if doc.id in by_id:
                raise DuplicateDocumentError(doc.id)
            by_id[doc.id] = doc
        self._documents: Dict[str, Document] = dict(sorted(by_id.items()))

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents.values())

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._documents

    def get(self, doc_id: str) -> Optional[Document]:
        return self._documents.get(doc_id)

    def require(self, doc_id: str) -> Document:
        doc = self._documents.get(doc_id)
        if doc is None:
            raise UnknownDocumentError(doc_id)
        return doc

    @property
    def ids(self) -> List[str]:
        return list(self._documents.keys())

    def index_files(self) -> List[Document]:
        return [d for d in self._documents.values() if d.is_index]

    def entries(self) -> List[IndexEntry]:
        out: List[IndexEntry] = []
        for doc in self.index_files():
            out.extend(doc.entries)
        return out
