from __future__ import annotations

import pytest

from core.catalog.markdown import parse_document, resolve_target, split_front_matter
from core.catalog.models import INDEX_KIND, normalize_tag
from core.errors import DocumentParseError
from tests.fixtures_corpus import ROUTING, STYLE


def test_parse_document_merges_front_matter_and_inline_tags() -> None:
    doc = parse_document("fastapi/routing.md", ROUTING)

    assert doc.title == "FastAPI routing"
    assert doc.description == "Guidance for structuring routers and endpoints."
    assert doc.tags == ["fastapi", "api", "routing"]
    assert doc.see_also == ["fastapi/dependencies.md", "security/secrets.md"]
    assert doc.kind == "document"


def test_links_inside_code_fences_are_ignored() -> None:
    doc = parse_document("fastapi/routing.md", ROUTING)

    assert "fastapi/nowhere.md" not in doc.links
    assert doc.links == ["fastapi/dependencies.md", "security/secrets.md"]


def test_rule_directive_keeps_file_line_number() -> None:
    doc = parse_document("fastapi/routing.md", ROUTING)

    assert len(doc.rules) == 1
    rule = doc.rules[0]
    assert rule.topic == "fastapi"
    assert rule.name == "Async endpoints"
    assert rule.description == "Use async def for I/O bound handlers."
    expected_line = ROUTING.splitlines().index(
        "@fastapi Rule - Async endpoints: Use async def for I/O bound handlers."
    ) + 1
    assert rule.line == expected_line
    assert rule.render() == "@fastapi Rule - Async endpoints: Use async def for I/O bound handlers."


def test_rule_directive_in_backticked_list_item() -> None:
    doc = parse_document("python/style.md", STYLE)

    assert [(r.topic, r.name, r.description) for r in doc.rules] == [
        ("python", "Naming", "Use snake_case for functions.")
    ]
    assert doc.see_also == ["fastapi/routing.md"]


def test_rule_directives_are_collected_inside_fences() -> None:
    text = "# Rules\n\n```\n@security Rule - Secrets: Read secrets from the environment.\n```\n"
    doc = parse_document("security/rules.md", text)

    assert [r.name for r in doc.rules] == ["Secrets"]


def test_malformed_rule_is_recorded() -> None:
    text = "# Rules\n\n@python Rule without a colon\n"
    doc = parse_document("python/rules.md", text)

    assert doc.rules == []
    assert len(doc.malformed_rules) == 1
    assert doc.malformed_rules[0].line == 3


def test_title_and_description_fallbacks() -> None:
    doc = parse_document("python/typing-notes.md", "Prefer precise annotations.\n\nMore text.\n")

    assert doc.title == "typing-notes"
    assert doc.description == "Prefer precise annotations."


def test_front_matter_overrides_title_description_and_kind() -> None:
    text = (
        "---\n"
        "title: Catalog\n"
        "description: Everything by topic\n"
        "kind: index\n"
        "tags: '#meta, overview'\n"
        "see_also:\n"
        "  - python/style.md\n"
        "---\n"
        "# Ignored heading\n"
    )
    doc = parse_document("catalog.md", text)

    assert doc.title == "Catalog"
    assert doc.description == "Everything by topic"
    assert doc.kind == INDEX_KIND
    assert doc.is_index
    assert doc.tags == ["meta", "overview"]
    assert doc.see_also == ["python/style.md"]


def test_see_also_section_ends_at_next_heading() -> None:
    text = (
        "# Doc\n\n"
        "## See Also\n"
        "- [A](a.md)\n"
        "### Details\n"
        "- [B](b.md)\n"
        "## Examples\n"
        "- [C](c.md)\n"
    )
    doc = parse_document("topic/doc.md", text)

    assert doc.see_also == ["topic/a.md", "topic/b.md"]
    assert doc.links == ["topic/a.md", "topic/b.md", "topic/c.md"]


def test_external_links_and_mail_links() -> None:
    text = (
        "# Doc\n\n"
        "Read [the docs](https://example.com/guide) or [mail us](mailto:team@example.com).\n"
        "Jump to [a section](#usage).\n"
    )
    doc = parse_document("doc.md", text)

    assert doc.external_links == ["https://example.com/guide"]
    assert doc.links == []


def test_invalid_front_matter_raises() -> None:
    with pytest.raises(DocumentParseError):
        parse_document("bad.md", "---\ntags: [unclosed\n---\n# Bad\n")

    with pytest.raises(DocumentParseError):
        split_front_matter("list.md", "---\n- a\n- b\n---\n# List\n")


def test_unterminated_front_matter_is_plain_markdown() -> None:
    meta, body, consumed = split_front_matter("rule.md", "---\n# Title\n")

    assert meta == {}
    assert consumed == 0
    assert body.startswith("---")


@pytest.mark.parametrize(
    "doc_id,target,expected",
    [
        ("fastapi/routing.md", "../security/secrets.md#env", "security/secrets.md"),
        ("fastapi/routing.md", "dependencies.md?plain=1", "fastapi/dependencies.md"),
        ("fastapi/routing.md", "/python/style.md", "python/style.md"),
        ("README.md", "../outside.md", "../outside.md"),
        ("python/style.md", "my%20notes.md", "python/my notes.md"),
        ("python/style.md", "#naming", None),
        ("python/style.md", "https://example.com", None),
    ],
)
def test_resolve_target(doc_id, target, expected) -> None:
    assert resolve_target(doc_id, target) == expected


def test_normalize_tag() -> None:
    assert normalize_tag(" #FastAPI ") == "fastapi"
    assert normalize_tag("security") == "security"


def test_front_matter_after_byte_order_mark() -> None:
    doc = parse_document("a.md", "\ufeff---\ntitle: T\ntags: [x]\nkind: index\n---\n# H\n\nBody.\n")

    assert doc.title == "T"
    assert doc.tags == ["x"]
    assert doc.is_index


def test_link_target_with_balanced_parentheses() -> None:
    text = "# Doc\n\nSee [REST](https://en.wikipedia.org/wiki/REST_(disambiguation)) and [a](a.md).\n"
    doc = parse_document("doc.md", text)

    assert doc.external_links == ["https://en.wikipedia.org/wiki/REST_(disambiguation)"]
    assert doc.links == ["a.md"]


def test_nested_fence_marker_does_not_close_block() -> None:
    text = "# Doc\n\n```markdown\n~~~\n[inside](inside.md)\n```\n\n[outside](outside.md)\n"
    doc = parse_document("doc.md", text)

    assert doc.links == ["outside.md"]
