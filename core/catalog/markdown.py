"""Markdown conventions used by the instruction-file corpus.

A document is a plain Markdown file with optional YAML front matter:

    ---
    title: FastAPI routing
    tags: [fastapi, api]
    see_also: [../security/auth.md]
    ---
    # FastAPI routing

    Guidance for structuring routers.

    Tags: #fastapi #routing

    ## See Also
    - [Dependency injection](dependencies.md)

Fenced code blocks are illustrative only: they never contribute titles,
tags or links. Rule directives (`@topic Rule - Name: Description`) are
collected everywhere, fences included.
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple
from urllib.parse import unquote

import yaml

from core.catalog.models import (
    DOCUMENT_KIND,
    INDEX_KIND,
    Document,
    MalformedRule,
    RuleDirective,
    normalize_tag,
)
from core.errors import DocumentParseError


_FENCE_RE = re.compile(r"^\s{0,3}(`{3,}|~{3,})")
_HEADING_RE = re.compile(r"^\s{0,3}(#{1,6})\s+(.*?)\s*#*\s*$")
_LINK_RE = re.compile(
    r"\[([^\]]*)\]\(\s*<?((?:[^()\s<>]|\([^()\s<>]*\))+)>?(?:\s+[\"'][^\"']*[\"'])?\s*\)"
)
_INLINE_CODE_RE = re.compile(r"`[^`]*`")
_TAGS_LINE_RE = re.compile(
    r"^\s*(?:[-*]\s+)?[*_]{0,2}(tags|keywords)[*_]{0,2}\s*:[*_]{0,2}\s*(.*)$",
    re.IGNORECASE,
)
_HASHTAG_RE = re.compile(r"(?<![\w&/])#([A-Za-z0-9][\w+-]*(?:\.[\w+-]+)*)")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")
_RULE_CANDIDATE_RE = re.compile(r"^\s*(?:[-*]\s+)?`?@[A-Za-z0-9][\w.-]*\s+Rule\b")
_RULE_RE = re.compile(
    r"^\s*(?:[-*]\s+)?`?@(?P<topic>[A-Za-z0-9][\w.-]*)\s+Rule\s*-\s*"
    r"(?P<name>[^:`]+?)\s*:\s*(?P<description>[^`]*?\S)\s*`?\s*$"
)
_SEE_ALSO_RE = re.compile(r"^[*_]*see\s+also[*_]*\s*:?\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class MarkdownLine:
    """A body line with its 1-based line number in the original file."""

    number: int
    text: str
    in_fence: bool
    # Opening or closing delimiter of a fenced block.
    delimiter: bool = False


def split_front_matter(doc_id: str, text: str) -> Tuple[Dict[str, Any], str, int]:
    """Split YAML front matter from the Markdown body.

    Returns:
        (front matter mapping, body text, number of lines consumed by the front matter).

    Raises:
        DocumentParseError: If the front matter is invalid YAML or not a mapping.
    """

    text = text.lstrip("\ufeff")
    lines = text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, text, 0

    for i in range(1, len(lines)):
        if lines[i].strip() in {"---", "..."}:
            raw = "\n".join(lines[1:i])
            try:
                parsed = yaml.safe_load(raw) if raw.strip() else {}
            except yaml.YAMLError as e:
                raise DocumentParseError(doc_id, f"invalid front matter: {e}") from e
            if parsed is None:
                parsed = {}
            if not isinstance(parsed, dict):
                raise DocumentParseError(
                    doc_id, f"front matter must be a mapping, got {type(parsed).__name__}"
                )
            body = "\n".join(lines[i + 1 :])
            return dict(parsed), body, i + 1

    # An opening delimiter without a closing one is plain Markdown (a horizontal rule).
    return {}, text, 0


def iter_lines(body: str, *, first_line: int = 1) -> Iterator[MarkdownLine]:
    """Yield body lines flagged with whether they sit inside a fenced code block."""

    fence: Optional[str] = None
    for offset, line in enumerate(body.splitlines()):
        number = first_line + offset
        m = _FENCE_RE.match(line)
        if fence is None:
            if m:
                fence = m.group(1)
                yield MarkdownLine(number, line, True, delimiter=True)
                continue
            yield MarkdownLine(number, line, False)
            continue

        closes = (
            m is not None
            and m.group(1)[0] == fence[0]
            and len(m.group(1)) >= len(fence)
            and not line.strip()[len(m.group(1)) :].strip()
        )
        yield MarkdownLine(number, line, True, delimiter=closes)
        if closes:
            fence = None


def parse_heading(line: str) -> Optional[Tuple[int, str]]:
    """Return (level, text) for an ATX heading line, else None."""

    m = _HEADING_RE.match(line)
    if not m:
        return None
    return len(m.group(1)), m.group(2).strip()


def find_links(line: str) -> List[Tuple[str, str]]:
    """Return (text, target) pairs for Markdown links on a line, ignoring inline code."""

    cleaned = _INLINE_CODE_RE.sub("", line)
    return [(m.group(1), m.group(2)) for m in _LINK_RE.finditer(cleaned)]


def tags_from_line(line: str) -> Optional[List[str]]:
    """Return the hashtags of a `Tags:` / `Keywords:` line, or None for other lines."""

    m = _TAGS_LINE_RE.match(line)
    if not m:
        return None
    rest = _INLINE_CODE_RE.sub(lambda c: c.group(0).strip("`"), m.group(2))
    return [normalize_tag(t) for t in _HASHTAG_RE.findall(rest)]


def is_external(target: str) -> bool:
    return bool(_SCHEME_RE.match(target or ""))


def resolve_target(doc_id: str, target: str) -> Optional[str]:
    """Resolve a relative link target against the linking document.

    Returns:
        A POSIX identifier relative to the corpus root, or None for pure anchors,
        URLs and mail links. Targets escaping the root stay prefixed with `..`.
    """

    raw = (target or "").strip()
    if not raw or is_external(raw):
        return None

    path = re.split(r"[#?]", raw, maxsplit=1)[0]
    if not path:
        return None

    path = unquote(path)
    if path.startswith("/"):
        joined = path.lstrip("/")
    else:
        joined = posixpath.join(posixpath.dirname(doc_id), path)

    normalized = posixpath.normpath(joined)
    if normalized == ".":
        return None
    return normalized


def _coerce_tags(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items = re.split(r"[\s,]+", value)
    elif isinstance(value, (list, tuple, set)):
        items = [str(v) for v in value]
    else:
        items = [str(value)]
    return [t for t in (normalize_tag(i) for i in items) if t]


def _coerce_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]
    return [str(value)]


def _dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            out.append(item)
    return out


def _is_prose(line: str) -> bool:
    s = line.strip()
    if not s:
        return False
    if parse_heading(s) is not None:
        return False
    if tags_from_line(s) is not None or _RULE_CANDIDATE_RE.match(s):
        return False
    if s.startswith(("|", "<!--", "- ", "* ", "+ ")) or re.match(r"^\d+[.)]\s", s):
        return False
    if re.fullmatch(r"[-*_=\s]{3,}", s):
        return False
    return True


def first_paragraph(lines: Iterable[MarkdownLine]) -> str:
    """Join the first run of prose lines (outside fences) into one string."""

    parts: List[str] = []
    for ml in lines:
        if ml.in_fence or not _is_prose(ml.text):
            if parts:
                break
            continue
        parts.append(ml.text.strip().lstrip(">").strip())
    return " ".join(p for p in parts if p)


def parse_rule(line: str, *, document: str, number: int) -> Optional[RuleDirective]:
    m = _RULE_RE.match(line)
    if not m:
        return None
    return RuleDirective(
        topic=m.group("topic").lower(),
        name=m.group("name").strip(),
        description=m.group("description").strip(),
        document=document,
        line=number,
    )


def parse_document(
    doc_id: str,
    text: str,
    *,
    path: Optional[str] = None,
    kind: Optional[str] = None,
) -> Document:
    """Parse one instruction file into a Document.

    Args:
        doc_id: POSIX path relative to the corpus root.
        text: Raw file content.
        path: Optional absolute path, kept for display.
        kind: Default kind when the front matter does not declare one.

    Raises:
        DocumentParseError: If the front matter is malformed.
    """

    meta, body, consumed = split_front_matter(doc_id, text)
    lines = list(iter_lines(body, first_line=consumed + 1))

    title: Optional[str] = None
    title_index = -1
    tags: List[str] = _coerce_tags(meta.get("tags"))
    see_also: List[str] = []
    links: List[str] = []
    external: List[str] = []
    rules: List[RuleDirective] = []
    malformed: List[MalformedRule] = []

    declared_kind = str(meta.get("kind") or "").strip().lower()
    doc_kind = declared_kind if declared_kind in {DOCUMENT_KIND, INDEX_KIND} else (kind or DOCUMENT_KIND)

    see_also_level: Optional[int] = None

    for i, ml in enumerate(lines):
        if _RULE_CANDIDATE_RE.match(ml.text):
            rule = parse_rule(ml.text, document=doc_id, number=ml.number)
            if rule is not None:
                rules.append(rule)
            else:
                malformed.append(MalformedRule(document=doc_id, line=ml.number, text=ml.text.strip()))

        if ml.in_fence:
            continue

        heading = parse_heading(ml.text)
        if heading is not None:
            level, heading_text = heading
            if title is None and level == 1:
                title = heading_text
                title_index = i
            if see_also_level is not None and level <= see_also_level:
                see_also_level = None
            if level >= 2 and _SEE_ALSO_RE.match(heading_text):
                see_also_level = level
            continue

        # Tag lines of an index file belong to its entries, not to the file itself.
        line_tags = tags_from_line(ml.text)
        if line_tags is not None and doc_kind != INDEX_KIND:
            tags.extend(line_tags)

        for _, target in find_links(ml.text):
            if is_external(target):
                if target.lower().startswith(("http://", "https://")):
                    external.append(target)
                continue
            resolved = resolve_target(doc_id, target)
            if resolved is None:
                continue
            links.append(resolved)
            if see_also_level is not None:
                see_also.append(resolved)

    for entry in _coerce_list(meta.get("see_also")):
        resolved = resolve_target(doc_id, entry)
        if resolved is not None:
            see_also.append(resolved)

    if meta.get("title"):
        title = str(meta["title"]).strip()
    if not title:
        title = posixpath.splitext(posixpath.basename(doc_id))[0]

    description = str(meta.get("description") or "").strip()
    if not description:
        description = first_paragraph(lines[title_index + 1 :])

    return Document(
        id=doc_id,
        title=title,
        description=description,
        tags=_dedupe(tags),
        see_also=_dedupe(see_also),
        kind=doc_kind,
        links=_dedupe(links),
        external_links=_dedupe(external),
        rules=rules,
        malformed_rules=malformed,
        body=body,
        path=path,
    )
