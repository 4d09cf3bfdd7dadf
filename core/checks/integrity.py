"""Content-integrity checks over a loaded catalog.

Each check is a function `(context) -> List[Issue]`; `run_checks` runs them
in order and collects a CheckReport.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple

from config import AppConfig
from core.catalog.models import Catalog, Document
from core.checks.external_links import check_urls, is_broken
from core.checks.readme_tree import parse_readme_tree
from core.checks.report import ERROR, WARNING, CheckReport, Issue

logger = logging.getLogger(__name__)


def escapes_root(rel: str) -> bool:
    return rel == ".." or rel.startswith("../")


@dataclass
class CheckContext:
    catalog: Catalog
    root: Path
    config: AppConfig

    @property
    def readme_id(self) -> str:
        return posixpath.normpath(self.config.readme_file.replace("\\", "/"))

    def exists_on_disk(self, rel: str) -> bool:
        return (self.root / rel).exists()


def check_duplicate_identifiers(ctx: CheckContext) -> List[Issue]:
    groups: Dict[str, List[str]] = {}
    for doc_id in ctx.catalog.ids:
        groups.setdefault(doc_id.casefold(), []).append(doc_id)

    issues: List[Issue] = []
    for ids in groups.values():
        if len(ids) < 2:
            continue
        issues.append(
            Issue(
                code="duplicate_identifier",
                severity=ERROR,
                document=ids[0],
                message=f"Identifier shared by {len(ids)} documents: {', '.join(sorted(ids))}",
            )
        )
    return issues


def check_see_also(ctx: CheckContext) -> List[Issue]:
    issues: List[Issue] = []
    for doc in ctx.catalog:
        for target in doc.see_also:
            if target == doc.id:
                issues.append(
                    Issue(
                        code="self_reference",
                        severity=WARNING,
                        document=doc.id,
                        target=target,
                        message="Document lists itself under See Also",
                    )
                )
            elif target not in ctx.catalog:
                issues.append(
                    Issue(
                        code="dangling_see_also",
                        severity=ERROR,
                        document=doc.id,
                        target=target,
                        message=f"See Also reference does not resolve: {target}",
                    )
                )
    return issues


def check_index_files(ctx: CheckContext) -> List[Issue]:
    carried: Set[str] = set()
    for doc in ctx.catalog:
        if not doc.is_index:
            carried.update(doc.tags)

    issues: List[Issue] = []
    for index_doc in ctx.catalog.index_files():
        reported_tags: Set[str] = set()
        for entry in index_doc.entries:
            for tag in entry.tags:
                if tag in carried or tag in reported_tags:
                    continue
                reported_tags.add(tag)
                issues.append(
                    Issue(
                        code="unused_index_tag",
                        severity=ERROR,
                        document=index_doc.id,
                        target=tag,
                        message=f"Tag #{tag} (section '{entry.title}') is carried by no document",
                    )
                )
            for target in entry.documents:
                if target in ctx.catalog:
                    continue
                issues.append(
                    Issue(
                        code="index_dangling_entry",
                        severity=ERROR,
                        document=index_doc.id,
                        target=target,
                        message=f"Index entry '{entry.title}' links to a missing document: {target}",
                    )
                )
    return issues


def check_readme_tree(ctx: CheckContext) -> List[Issue]:
    readme_path = ctx.root / ctx.readme_id
    if not readme_path.is_file():
        logger.info("No README at %s; skipping directory tree check", readme_path)
        return []

    text = readme_path.read_text(encoding="utf-8-sig")
    tree = parse_readme_tree(text)
    if tree is None:
        return [
            Issue(
                code="readme_tree_missing",
                severity=WARNING,
                document=ctx.readme_id,
                message="README contains no directory tree",
            )
        ]

    base = posixpath.dirname(ctx.readme_id)
    declared: List[str] = []
    for rel in tree.documents(ctx.config.document_extensions):
        declared.append(posixpath.normpath(posixpath.join(base, rel)) if base else rel)
    declared_set = set(declared)

    issues: List[Issue] = []
    for doc_id in declared:
        if doc_id in ctx.catalog or ctx.exists_on_disk(doc_id):
            continue
        issues.append(
            Issue(
                code="readme_missing_document",
                severity=ERROR,
                document=ctx.readme_id,
                target=doc_id,
                message=f"README declares a document that does not exist: {doc_id}",
            )
        )

    for doc in ctx.catalog:
        if doc.id == ctx.readme_id or doc.is_index or doc.id in declared_set:
            continue
        issues.append(
            Issue(
                code="readme_undeclared_document",
                severity=ERROR,
                document=doc.id,
                message="Document is not declared in the README directory tree",
            )
        )
    return issues


def check_body_links(ctx: CheckContext) -> List[Issue]:
    issues: List[Issue] = []
    for doc in ctx.catalog:
        see_also = set(doc.see_also)
        for target in doc.links:
            if target in see_also:
                continue
            if escapes_root(target):
                message = f"Link target escapes the corpus root: {target}"
            elif target in ctx.catalog or ctx.exists_on_disk(target):
                continue
            else:
                message = f"Link target not found: {target}"
            issues.append(
                Issue(
                    code="broken_link",
                    severity=WARNING,
                    document=doc.id,
                    target=target,
                    message=message,
                )
            )
    return issues


def check_orphans(ctx: CheckContext) -> List[Issue]:
    referenced: Set[str] = set()
    for entry in ctx.catalog.entries():
        referenced.update(entry.documents)
    for doc in ctx.catalog:
        referenced.update(t for t in doc.see_also if t != doc.id)

    issues: List[Issue] = []
    for doc in ctx.catalog:
        if doc.is_index or doc.id == ctx.readme_id or doc.id in referenced:
            continue
        issues.append(
            Issue(
                code="orphan_document",
                severity=WARNING,
                document=doc.id,
                message="Document is referenced by no index entry and no See Also section",
            )
        )
    return issues


def check_tags(ctx: CheckContext) -> List[Issue]:
    return [
        Issue(
            code="untagged_document",
            severity=WARNING,
            document=doc.id,
            message="Document carries no tag",
        )
        for doc in ctx.catalog
        if not doc.tags and not doc.is_index and doc.id != ctx.readme_id
    ]


def check_rules(ctx: CheckContext) -> List[Issue]:
    issues: List[Issue] = []
    for doc in ctx.catalog:
        for bad in doc.malformed_rules:
            issues.append(
                Issue(
                    code="malformed_rule",
                    severity=WARNING,
                    document=doc.id,
                    line=bad.line,
                    message=f"Expected '@topic Rule - Name: Description', got: {bad.text}",
                )
            )
    return issues


def check_external_links(ctx: CheckContext) -> List[Issue]:
    owners: Dict[str, List[Document]] = {}
    for doc in ctx.catalog:
        for url in doc.external_links:
            owners.setdefault(url.rstrip(".,"), []).append(doc)

    statuses = check_urls(
        owners.keys(),
        timeout=ctx.config.external_link_timeout,
        max_workers=ctx.config.external_link_workers,
    )

    issues: List[Issue] = []
    for url, status in sorted(statuses.items()):
        if not is_broken(status):
            continue
        for doc in owners.get(url, []):
            issues.append(
                Issue(
                    code="external_link_unreachable",
                    severity=WARNING,
                    document=doc.id,
                    target=url,
                    message=f"Status {status} | {url}",
                )
            )
    return issues


CheckFn = Callable[[CheckContext], List[Issue]]

DEFAULT_CHECKS: List[Tuple[str, CheckFn]] = [
    ("duplicate_identifiers", check_duplicate_identifiers),
    ("see_also", check_see_also),
    ("index_files", check_index_files),
    ("readme_tree", check_readme_tree),
    ("body_links", check_body_links),
    ("orphans", check_orphans),
    ("tags", check_tags),
    ("rules", check_rules),
]


def run_checks(
    catalog: Catalog,
    root: Path,
    config: Optional[AppConfig] = None,
    *,
    external: Optional[bool] = None,
) -> CheckReport:
    """Run every integrity check over a catalog.

    Args:
        catalog: Loaded catalog.
        root: Corpus root directory (README and link targets are resolved against it).
        config: Loaded application config (defaults when omitted).
        external: Override `config.check_external_links`.
    """

    cfg = config or AppConfig()
    ctx = CheckContext(catalog=catalog, root=Path(root), config=cfg)

    checks = list(DEFAULT_CHECKS)
    if cfg.check_external_links if external is None else external:
        checks.append(("external_links", check_external_links))

    report = CheckReport(documents_checked=len(catalog))
    for name, fn in checks:
        found = fn(ctx)
        logger.debug("Check %s: %d issues", name, len(found))
        report.checks_run.append(name)
        report.issues.extend(found)

    logger.info(
        "Integrity check finished: %d documents, %d errors, %d warnings",
        report.documents_checked,
        len(report.errors),
        len(report.warnings),
    )
    return report
