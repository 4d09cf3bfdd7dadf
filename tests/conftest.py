from __future__ import annotations

from pathlib import Path

import pytest

from tests.fixtures_corpus import write_corpus


@pytest.fixture
def corpus(tmp_path: Path) -> Path:
    """A small, consistent instruction-file corpus."""
    return write_corpus(tmp_path / "prompts")


@pytest.fixture(autouse=True)
def _isolated_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PROMPT_CATALOG_CONFIG", raising=False)
