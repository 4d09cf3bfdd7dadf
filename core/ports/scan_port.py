from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Sequence

from core.catalog.models import Document


class ScanProgressCallback(Protocol):
    def __call__(self, current: int, total: int, message: Optional[str]) -> None: ...

class DocumentScanner(ABC):
    """Interface for scanning a corpus for instruction files."""

    @abstractmethod
    def scan(
        self,
        root_dir: Path,
        progress_callback: Optional[ScanProgressCallback] = None,
    ) -> List[Document]:
        """Scan and parse documents from the corpus."""
        pass

    @abstractmethod
    def iter_files(
        self,
        root_dir: Path,
        extensions: Sequence[str] = (".md",),
        exclude_dirs: Sequence[str] = (),
    ) -> Iterable[Path]:
        """Yield document files found in the corpus."""
        pass
