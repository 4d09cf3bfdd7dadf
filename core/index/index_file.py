"""Parse index files into tag -> recommended-documents entries.

An index file groups instruction files by task. Each level-2/3 section that
links to at least one document becomes an entry:

    ## Building API endpoints
    Keywords: #fastapi #api
    When to use: adding or changing HTTP routes.

    1. [Routing](fastapi/routing.md)
    2. [Validation](fastapi/validation.md)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

from core.catalog.markdown import (
    MarkdownLine,
    find_links,
    first_paragraph,
    is_external,
    iter_lines,
    parse_heading,
    resolve_target,
    tags_from_line,
)
from core.catalog.models import Document, IndexEntry


_WHEN_TO_USE_RE = re.compile(
    r"^\s*[*_]{0,2}when\s+to\s+use[*_]{0,2}\s*:[*_]{0,2}\s*(.*)$", re.IGNORECASE
)
_SEE_ALSO_TITLE_RE = re.compile(r"^see\s+also:?$", re.IGNORECASE)


@dataclass
class _Section:
    title: str
    lines: List[MarkdownLine] = field(default_factory=list)


def _sections(doc: Document) -> List[_Section]:
    sections: List[_Section] = []
    current: Optional[_Section] = None
    for ml in iter_lines(doc.body):
        if not ml.in_fence:
            heading = parse_heading(ml.text)
            if heading is not None:
                level, text = heading
                if level in (2, 3):
                    current = _Section(title=text)
                    sections.append(current)
                    continue
                if level == 1:
                    current = None
                    continue
        if current is not None:
            current.lines.append(ml)
    return sections


def parse_index_entries(doc: Document) -> List[IndexEntry]:
    """Build IndexEntry records from the sections of an index file."""

    entries: List[IndexEntry] = []
    for section in _sections(doc):
        if _SEE_ALSO_TITLE_RE.match(section.title.strip("*_ ")):
            continue

        tags: List[str] = []
        description = ""
        documents: List[str] = []

        for ml in section.lines:
            if ml.in_fence:
                continue
            line_tags = tags_from_line(ml.text)
            if line_tags is not None:
                tags.extend(t for t in line_tags if t not in tags)
                continue
            m = _WHEN_TO_USE_RE.match(ml.text)
            if m and not description:
                description = m.group(1).strip()
            for _, target in find_links(ml.text):
                if is_external(target):
                    continue
                resolved = resolve_target(doc.id, target)
                if resolved is not None and resolved not in documents:
                    documents.append(resolved)

        if not documents:
            continue

        if not description:
            description = first_paragraph(section.lines)

        entries.append(
            IndexEntry(
                title=section.title,
                source=doc.id,
                tags=tuple(tags),
                description=description,
                documents=tuple(documents),
            )
        )
    return entries
