"""Parse the directory tree a README declares for the corpus.

    ```
    prompts/
    ├── README.md
    ├── fastapi/
    │   ├── routing.md      # routers and endpoints
    │   └── validation.md
    └── security/
        └── secrets.md
    ```
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from core.catalog.markdown import iter_lines


_CONNECTOR_RE = re.compile(r"(├──|└──|\|--|`--|\+--)[─-]*\s*(\S+)")


@dataclass
class DeclaredTree:
    """Paths declared in a README directory tree, relative to the corpus root."""

    directories: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    root: Optional[str] = None

    def documents(self, extensions: Sequence[str] = (".md",)) -> List[str]:
        suffixes = tuple(e.lower() for e in extensions)
        return [f for f in self.files if f.lower().endswith(suffixes)]


def _fenced_blocks(text: str) -> List[List[str]]:
    blocks: List[List[str]] = []
    current: Optional[List[str]] = None
    for ml in iter_lines(text):
        if ml.delimiter:
            if current is None:
                current = []
                blocks.append(current)
            else:
                current = None
            continue
        if current is not None:
            current.append(ml.text)
    return blocks


def parse_tree_block(lines: Sequence[str]) -> DeclaredTree:
    tree = DeclaredTree()
    stack: List[Tuple[int, str]] = []

    for line in lines:
        if not line.strip():
            continue
        m = _CONNECTOR_RE.search(line)
        if m is None:
            stripped = line.strip()
            if tree.root is None and not tree.files and not tree.directories and not stripped.startswith("│"):
                tree.root = stripped.split()[0]
            continue

        column = m.start(1)
        name = m.group(2)
        if name in {"...", "…"}:
            continue

        while stack and stack[-1][0] >= column:
            stack.pop()

        is_dir = name.endswith("/")
        clean = name.rstrip("/")
        parent = stack[-1][1] if stack else ""
        path = f"{parent}/{clean}" if parent else clean

        if is_dir:
            tree.directories.append(path)
        else:
            tree.files.append(path)
        stack.append((column, path))

    return tree


def parse_readme_tree(text: str) -> Optional[DeclaredTree]:
    """Return the first directory tree found in a fenced block, or None."""

    for block in _fenced_blocks(text):
        if any(_CONNECTOR_RE.search(line) for line in block):
            return parse_tree_block(block)
    return None
