from __future__ import annotations

import logging
import re
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from core.catalog.models import Catalog, IndexEntry, RuleDirective, normalize_tag

logger = logging.getLogger(__name__)


_TOKEN_RE = re.compile(r"#?[a-z0-9][a-z0-9+_.-]*")
_TAG_PARTS_RE = re.compile(r"[-_\s]+")

# Matches through an index entry weigh more than a tag the document carries itself.
INDEX_MATCH_WEIGHT = 2
DOCUMENT_MATCH_WEIGHT = 1


@dataclass
class LookupResult:
    """A recommended document for a task or tag."""

    id: str
    title: str
    description: str
    score: int = 0
    matched_tags: List[str] = field(default_factory=list)
    entries: List[str] = field(default_factory=list)
    related_to: Optional[str] = None


def tokenize(task: str) -> Set[str]:
    """Lowercase word and `#tag` tokens of a free-text task description."""

    tokens: Set[str] = set()
    for raw in _TOKEN_RE.findall((task or "").lower()):
        token = raw.lstrip("#").rstrip(".")
        if token:
            tokens.add(token)
    return tokens


def tag_matches(tag: str, tokens: Set[str]) -> bool:
    if tag in tokens:
        return True
    parts = [p for p in _TAG_PARTS_RE.split(tag) if p]
    return len(parts) > 1 and all(p in tokens for p in parts)


class CatalogIndex:
    """Static tag -> document lookup over a Catalog and its index files."""

    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog
        self._entries: List[IndexEntry] = catalog.entries()

        self._by_tag: Dict[str, List[str]] = {}
        for doc in catalog:
            for tag in doc.tags:
                self._by_tag.setdefault(tag, []).append(doc.id)

        # tag -> ordered (position, doc_id, entry title) through index entries
        self._entry_docs: Dict[str, List[Tuple[int, str, str]]] = {}
        position = 0
        for entry in self._entries:
            for doc_id in entry.documents:
                for tag in entry.tags:
                    self._entry_docs.setdefault(tag, []).append((position, doc_id, entry.title))
                position += 1

    @property
    def entries(self) -> List[IndexEntry]:
        return list(self._entries)

    def tags(self) -> Dict[str, int]:
        """Return tag -> number of documents carrying it, sorted by tag."""

        known: Set[str] = set(self._by_tag)
        known.update(self._entry_docs)
        return {tag: len(self._by_tag.get(tag, [])) for tag in sorted(known)}

    def is_known_tag(self, tag: str) -> bool:
        t = normalize_tag(tag)
        return t in self._by_tag or t in self._entry_docs

    def documents_for_tag(self, tag: str) -> List[str]:
        """Ordered document identifiers for a tag; empty when the tag is unknown."""

        t = normalize_tag(tag)
        out: List[str] = []
        for _, doc_id, _ in self._entry_docs.get(t, []):
            if doc_id in self.catalog and doc_id not in out:
                out.append(doc_id)
        for doc_id in sorted(self._by_tag.get(t, [])):
            if doc_id not in out:
                out.append(doc_id)
        return out

    def lookup(
        self,
        task: str,
        *,
        limit: Optional[int] = None,
        include_related: bool = False,
    ) -> List[LookupResult]:
        """Rank documents for a free-text task description."""

        tokens = tokenize(task)
        if not tokens:
            return []

        scores: Dict[str, int] = {}
        matched: Dict[str, List[str]] = {}
        via_entries: Dict[str, List[str]] = {}
        best_position: Dict[str, int] = {}

        def _hit(doc_id: str, tag: str, weight: int) -> None:
            scores[doc_id] = scores.get(doc_id, 0) + weight
            tags = matched.setdefault(doc_id, [])
            if tag not in tags:
                tags.append(tag)

        for tag, entry_docs in self._entry_docs.items():
            if not tag_matches(tag, tokens):
                continue
            seen: Set[str] = set()
            for position, doc_id, entry_title in entry_docs:
                if doc_id not in self.catalog:
                    continue
                best_position[doc_id] = min(best_position.get(doc_id, position), position)
                titles = via_entries.setdefault(doc_id, [])
                if entry_title not in titles:
                    titles.append(entry_title)
                if doc_id in seen:
                    continue
                seen.add(doc_id)
                _hit(doc_id, tag, INDEX_MATCH_WEIGHT)

        for tag, doc_ids in self._by_tag.items():
            if not tag_matches(tag, tokens):
                continue
            for doc_id in doc_ids:
                _hit(doc_id, tag, DOCUMENT_MATCH_WEIGHT)

        no_position = float("inf")
        ranked = sorted(
            scores,
            key=lambda d: (-scores[d], best_position.get(d, no_position), d),
        )
        if limit is not None:
            ranked = ranked[: max(0, int(limit))]

        results = [
            self._result(doc_id, scores[doc_id], matched[doc_id], via_entries.get(doc_id, []))
            for doc_id in ranked
        ]

        if include_related:
            present = {r.id for r in results}
            for hit in list(results):
                for rel_id in self.related(hit.id):
                    if rel_id in present:
                        continue
                    present.add(rel_id)
                    results.append(self._result(rel_id, 0, [], [], related_to=hit.id))

        logger.debug("Lookup %r matched %d documents", task, len(results))
        return results

    def resolve(
        self,
        query: str,
        *,
        limit: Optional[int] = None,
        include_related: bool = False,
    ) -> List[LookupResult]:
        """Tag lookup for a single tag (`#x` or a known tag), task lookup otherwise."""

        q = (query or "").strip()
        single = len(q.split()) == 1
        if single and (q.startswith("#") or self.is_known_tag(q)):
            tag = normalize_tag(q)
            doc_ids = self.documents_for_tag(tag)
            if limit is not None:
                doc_ids = doc_ids[: max(0, int(limit))]
            results = [self._result(d, 0, [tag], []) for d in doc_ids]
            if include_related:
                present = set(doc_ids)
                for doc_id in doc_ids:
                    for rel_id in self.related(doc_id):
                        if rel_id not in present:
                            present.add(rel_id)
                            results.append(self._result(rel_id, 0, [], [], related_to=doc_id))
            return results
        return self.lookup(q, limit=limit, include_related=include_related)

    def related(self, doc_id: str, *, depth: int = 1) -> List[str]:
        """Breadth-first See Also closure of a document, in discovery order."""

        start = self.catalog.require(doc_id)
        out: List[str] = []
        visited = {start.id}
        queue = deque([(start.id, 0)])
        while queue:
            current, level = queue.popleft()
            if level >= depth:
                continue
            doc = self.catalog.get(current)
            if doc is None:
                continue
            for target in doc.see_also:
                if target in visited or target not in self.catalog:
                    continue
                visited.add(target)
                out.append(target)
                queue.append((target, level + 1))
        return out

    def rules(self, topic: Optional[str] = None) -> List[RuleDirective]:
        wanted = normalize_tag(topic) if topic else None
        out: List[RuleDirective] = []
        for doc in self.catalog:
            for rule in doc.rules:
                if wanted is None or rule.topic == wanted:
                    out.append(rule)
        return out

    def _result(
        self,
        doc_id: str,
        score: int,
        matched_tags: Sequence[str],
        entries: Sequence[str],
        *,
        related_to: Optional[str] = None,
    ) -> LookupResult:
        doc = self.catalog.require(doc_id)
        return LookupResult(
            id=doc.id,
            title=doc.title,
            description=doc.description,
            score=score,
            matched_tags=list(matched_tags),
            entries=list(entries),
            related_to=related_to,
        )
