from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from config import apply_config_to_env, configure_logging, load_config
from core.catalog.loader import load_catalog
from core.checks.integrity import run_checks


logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""

    parser = argparse.ArgumentParser(description="Check the instruction-file corpus for broken references")
    parser.add_argument(
        "--root",
        default=None,
        help="Corpus root directory (defaults to config.docs_root)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config (defaults to PROMPT_CATALOG_CONFIG or prompt-catalog.yaml)",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Report format (default: text)",
    )
    parser.add_argument(
        "--external",
        action="store_true",
        help="Also check absolute http(s) links (performs network requests)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on warnings too",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint for the integrity checker.

    Returns:
        0 when the corpus passes, 1 when issues fail the run, 2 on unexpected failure.
    """

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
        report = run_checks(catalog, root, config, external=True if args.external else None)
    except Exception as e:
        logger.error("Integrity check failed: %s: %s", type(e).__name__, e)
        return 2

    if args.format == "json":
        sys.stdout.write(report.to_json() + "\n")
    else:
        sys.stdout.write(report.render_text() + "\n")

    return 0 if report.passed(strict=bool(args.strict)) else 1


if __name__ == "__main__":
    raise SystemExit(main())
