from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from core.catalog.markdown import parse_document
from core.catalog.models import DOCUMENT_KIND, INDEX_KIND, Document
from core.errors import DocumentParseError
from core.index.index_file import parse_index_entries
from core.ports.scan_port import DocumentScanner, ScanProgressCallback

logger = logging.getLogger(__name__)


DEFAULT_EXCLUDE_DIRS = {
    ".git",
    ".venv",
    "venv",
    "build",
    "dist",
    "__pycache__",
    "node_modules",
    ".pytest_cache",
    ".mypy_cache",
}


def document_id(path: Path, *, root: Path) -> str:
    """Return the POSIX identifier of a file relative to the corpus root."""
    try:
        rel = path.resolve().relative_to(root.resolve())
    except ValueError:
        rel = path
    return rel.as_posix()


def is_index_file(doc_id: str, patterns: Sequence[str]) -> bool:
    name = doc_id.rsplit("/", 1)[-1]
    return any(fnmatch.fnmatchcase(name, p) for p in patterns)


class FileSystemScanner(DocumentScanner):
    """File system implementation of the DocumentScanner."""

    def __init__(
        self,
        *,
        extensions: Sequence[str] = (".md",),
        exclude_dirs: Sequence[str] = (),
        index_file_patterns: Sequence[str] = (),
    ) -> None:
        self.extensions = [e.lower() for e in extensions]
        self.exclude_dirs = list(exclude_dirs)
        self.index_file_patterns = list(index_file_patterns)

    def iter_files(
        self,
        root_dir: Path,
        extensions: Optional[Sequence[str]] = None,
        exclude_dirs: Optional[Sequence[str]] = None,
    ) -> Iterable[Path]:
        """Yield document files under a directory, sorted for stable output."""
        if not root_dir.exists():
            return []

        suffixes = {e.lower() for e in (extensions or self.extensions)}
        skip = set(DEFAULT_EXCLUDE_DIRS)
        skip.update(exclude_dirs if exclude_dirs is not None else self.exclude_dirs)

        found: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(root_dir):
            dirnames[:] = sorted(d for d in dirnames if d not in skip)

            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                if path.suffix.lower() in suffixes:
                    found.append(path)
        return found

    def parse_file(self, path: Path, *, root_dir: Path) -> Document:
        """Read and parse one file into a Document (index entries included)."""

        doc_id = document_id(path, root=root_dir)
        text = path.read_text(encoding="utf-8-sig")
        default_kind = INDEX_KIND if is_index_file(doc_id, self.index_file_patterns) else DOCUMENT_KIND
        doc = parse_document(doc_id, text, path=str(path), kind=default_kind)
        if doc.is_index:
            doc.entries = parse_index_entries(doc)
        return doc

    def scan(
        self,
        root_dir: Path,
        progress_callback: Optional[ScanProgressCallback] = None,
    ) -> List[Document]:
        """Scan a directory and parse every instruction file found."""

        documents: List[Document] = []

        files = list(self.iter_files(root_dir))
        total_files = len(files)
        logger.info("Scanning %d instruction files under %s", total_files, root_dir)

        if progress_callback is not None:
            progress_callback(0, total_files, None)

        processed_files = 0

        for path in files:
            try:
                documents.append(self.parse_file(path, root_dir=root_dir))
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping unreadable file %s: %s", path, e)
            except DocumentParseError as e:
                logger.warning("Skipping unparsable file %s: %s", path, e)

            processed_files += 1
            if progress_callback is not None:
                progress_callback(processed_files, total_files, str(path))

        if progress_callback is not None:
            progress_callback(processed_files, total_files, "")

        return documents

