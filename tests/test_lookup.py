from __future__ import annotations

from pathlib import Path

import pytest

from core.catalog.loader import load_catalog
from core.errors import UnknownDocumentError
from core.index.lookup import CatalogIndex, tag_matches, tokenize
from core.index.store import DocumentStore
from tests.fixtures_corpus import write_corpus


@pytest.fixture
def index(corpus: Path) -> CatalogIndex:
    return CatalogIndex(load_catalog(corpus))


def test_tags_counts_documents(index: CatalogIndex) -> None:
    tags = index.tags()

    assert tags["fastapi"] == 2
    assert tags["api"] == 1
    assert tags["security"] == 1
    assert list(tags) == sorted(tags)


def test_documents_for_tag_follows_index_order(index: CatalogIndex) -> None:
    assert index.documents_for_tag("#fastapi") == ["fastapi/routing.md", "fastapi/dependencies.md"]
    assert index.documents_for_tag("dependencies") == ["fastapi/dependencies.md"]


def test_documents_for_unknown_tag_is_empty(index: CatalogIndex) -> None:
    assert index.documents_for_tag("graphql") == []
    assert index.lookup("design a graphql schema") == []
    assert index.lookup("") == []


def test_lookup_ranks_index_matches_first(index: CatalogIndex) -> None:
    results = index.lookup("How do I add an API endpoint with FastAPI?")

    assert [r.id for r in results] == ["fastapi/routing.md", "fastapi/dependencies.md"]
    assert results[0].score == 6
    assert results[1].score == 5
    assert set(results[0].matched_tags) == {"fastapi", "api"}
    assert results[0].entries == ["Building API endpoints"]


def test_lookup_limit(index: CatalogIndex) -> None:
    results = index.lookup("fastapi api", limit=1)

    assert [r.id for r in results] == ["fastapi/routing.md"]


def test_lookup_include_related_appends_see_also(index: CatalogIndex) -> None:
    results = index.lookup("store secrets safely", include_related=True)

    assert [r.id for r in results] == ["security/secrets.md", "python/style.md"]
    assert results[0].score == 3
    assert results[1].score == 0
    assert results[1].related_to == "security/secrets.md"


def test_resolve_dispatches_on_single_tag(index: CatalogIndex) -> None:
    assert [r.id for r in index.resolve("#python")] == ["python/style.md"]
    assert [r.id for r in index.resolve("security")] == ["security/secrets.md"]
    assert [r.id for r in index.resolve("#unknown")] == []
    assert [r.id for r in index.resolve("python code style review")] == ["python/style.md"]


def test_related_walks_see_also_breadth_first(index: CatalogIndex) -> None:
    assert index.related("fastapi/routing.md") == ["fastapi/dependencies.md", "security/secrets.md"]
    assert index.related("fastapi/routing.md", depth=2) == [
        "fastapi/dependencies.md",
        "security/secrets.md",
        "python/style.md",
    ]

    with pytest.raises(UnknownDocumentError):
        index.related("missing.md")


def test_rules_filter_by_topic(index: CatalogIndex) -> None:
    assert len(index.rules()) == 2
    assert [r.name for r in index.rules("#fastapi")] == ["Async endpoints"]
    assert index.rules("go") == []


def test_document_store_loads_contents_in_order(corpus: Path) -> None:
    catalog = load_catalog(corpus)
    store = DocumentStore(corpus, catalog)

    pairs = store.load_contents(["python/style.md", "INDEX.md", "python/style.md"])

    assert [doc_id for doc_id, _ in pairs] == ["python/style.md", "INDEX.md"]
    assert pairs[0][1].startswith("# Python style")

    with pytest.raises(UnknownDocumentError):
        store.load_contents(["nope.md"])


def test_tokenize_and_tag_matching() -> None:
    tokens = tokenize("Add #Rate-Limiting to the login endpoint.")

    assert "rate-limiting" in tokens
    assert "endpoint" in tokens
    assert tag_matches("rate-limiting", tokens)
    assert tag_matches("login_endpoint", tokens)
    assert not tag_matches("logout", tokens)


@pytest.fixture
def tied_index(tmp_path: Path) -> CatalogIndex:
    write_corpus(
        tmp_path,
        {
            "INDEX.md": "# Index\n\n## Testing\nKeywords: #testing\n\n- [Zeta](zeta.md)\n",
            "zeta.md": "# Zeta\n\nKeywords: #python\n",
            "alpha.md": (
                "# Alpha\n\nKeywords: #python #testing #pytest\n\n"
                "## See Also\n- [Gone](gone.md)\n- [Beta](beta.md)\n"
            ),
            "beta.md": "# Beta\n\nKeywords: #python #testing #pytest\n",
        },
    )
    return CatalogIndex(load_catalog(tmp_path))


def test_lookup_ties_break_by_index_position_then_identifier(tied_index: CatalogIndex) -> None:
    results = tied_index.lookup("python testing with pytest")

    assert [(r.id, r.score) for r in results] == [("zeta.md", 3), ("alpha.md", 3), ("beta.md", 3)]
    assert results[0].entries == ["Testing"]
    assert results[1].entries == []


def test_related_skips_unresolved_see_also(tied_index: CatalogIndex) -> None:
    assert tied_index.related("alpha.md") == ["beta.md"]
    assert tied_index.related("alpha.md", depth=3) == ["beta.md"]
