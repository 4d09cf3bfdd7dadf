from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from config import apply_config_to_env, configure_logging, load_config
from core.catalog.loader import load_catalog
from core.errors import UnknownDocumentError
from core.index.lookup import CatalogIndex, LookupResult
from core.index.store import DocumentStore


logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""

    parser = argparse.ArgumentParser(
        description="Map a task description or tag to recommended instruction files"
    )
    parser.add_argument(
        "query",
        nargs="*",
        help="Task description or tag (e.g. '#fastapi' or 'add rate limiting to an endpoint')",
    )
    parser.add_argument("--root", default=None, help="Corpus root directory (defaults to config.docs_root)")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config (defaults to PROMPT_CATALOG_CONFIG or prompt-catalog.yaml)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of documents (defaults to config.lookup_limit)",
    )
    parser.add_argument("--related", action="store_true", help="Append See Also neighbours of the hits")
    parser.add_argument("--content", action="store_true", help="Print the text of the recommended documents")
    parser.add_argument(
        "--rules",
        nargs="?",
        const="",
        default=None,
        metavar="TOPIC",
        help="List rule directives instead of documents, optionally for one topic",
    )
    parser.add_argument("--tags", action="store_true", help="List known tags with document counts")
    parser.add_argument("--format", choices=["text", "json"], default="text")
    return parser.parse_args(argv)


def _render_results(results: List[LookupResult]) -> str:
    if not results:
        return "No matching documents."
    lines: List[str] = []
    for i, r in enumerate(results, start=1):
        suffix = f" (see also from {r.related_to})" if r.related_to else ""
        tags = f" [{', '.join('#' + t for t in r.matched_tags)}]" if r.matched_tags else ""
        lines.append(f"{i}. {r.id} - {r.title}{tags}{suffix}")
        if r.description:
            lines.append(f"   {r.description}")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint for task/tag lookup."""

    load_dotenv(override=False)

    args = _parse_args(argv)
    try:
        config = load_config(args.config)
        configure_logging(config.debug_level)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 2
    apply_config_to_env(config)

    root = Path(args.root or config.docs_root).expanduser().resolve()

    try:
        catalog = load_catalog(root, config)
    except Exception as e:
        logger.error("Catalog load failed: %s: %s", type(e).__name__, e)
        return 2

    index = CatalogIndex(catalog)

    if args.tags:
        tags = index.tags()
        if args.format == "json":
            sys.stdout.write(json.dumps(tags, indent=2) + "\n")
        else:
            for tag, count in tags.items():
                sys.stdout.write(f"#{tag} ({count})\n")
        return 0

    if args.rules is not None:
        rules = index.rules(args.rules or None)
        if args.format == "json":
            sys.stdout.write(json.dumps([asdict(r) for r in rules], indent=2) + "\n")
        else:
            for rule in rules:
                sys.stdout.write(rule.render() + "\n")
        return 0

    query = " ".join(args.query).strip()
    if not query:
        logger.error("A task description or tag is required")
        return 2

    limit = args.limit if args.limit is not None else config.lookup_limit
    results = index.resolve(query, limit=limit, include_related=bool(args.related))

    contents: Dict[str, str] = {}
    if args.content and results:
        store = DocumentStore(root, catalog)
        try:
            contents = dict(store.load_contents(r.id for r in results))
        except UnknownDocumentError as e:
            logger.error("Cannot load document text: %s", e)
            return 2

    if args.format == "json":
        out: Dict[str, Any] = {
            "query": query,
            "results": [asdict(r) for r in results],
        }
        if args.content:
            out["contents"] = contents
        sys.stdout.write(json.dumps(out, indent=2) + "\n")
        return 0

    sys.stdout.write(_render_results(results) + "\n")
    for doc_id, text in contents.items():
        sys.stdout.write(f"\n===== {doc_id} =====\n{text}\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
