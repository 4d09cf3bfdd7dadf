from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from config import AppConfig
from core.catalog.models import Catalog
from core.ports.scan_port import ScanProgressCallback
from core.scanning.scanner import FileSystemScanner

logger = logging.getLogger(__name__)


def build_scanner(config: AppConfig) -> FileSystemScanner:
    return FileSystemScanner(
        extensions=config.document_extensions,
        exclude_dirs=config.exclude_dirs,
        index_file_patterns=config.index_file_patterns,
    )


def load_catalog(
    root: Union[str, Path],
    config: Optional[AppConfig] = None,
    *,
    progress_callback: Optional[ScanProgressCallback] = None,
) -> Catalog:
    """Scan the corpus root and build an immutable Catalog.

    Args:
        root: Corpus root directory.
        config: Loaded application config (defaults when omitted).
        progress_callback: Optional `(processed, total, current)` callback.

    Raises:
        FileNotFoundError: If the root directory does not exist.
    """

    root_dir = Path(root).expanduser()
    if not root_dir.is_dir():
        raise FileNotFoundError(f"Corpus root not found: {root_dir}")

    cfg = config or AppConfig()
    documents = build_scanner(cfg).scan(root_dir, progress_callback=progress_callback)
    catalog = Catalog(documents)

    logger.info(
        "Loaded %d documents (%d index files) from %s",
        len(catalog),
        len(catalog.index_files()),
        root_dir,
    )
    return catalog
