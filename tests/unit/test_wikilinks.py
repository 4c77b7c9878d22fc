"""Unit tests for wiki-link extraction."""

import pytest

from wikigraph.services.wikilinks import (
    WikiLink,
    extract_wikilinks,
    iter_wikilink_matches,
    wikilinks_to_markdown,
)


class TestExtractWikilinks:
    """Tests for extract_wikilinks."""

    def test_duplicates_collapse_to_first_occurrence(self) -> None:
        links = extract_wikilinks("See [[Foo]] and [[Foo|Bar]] and [[Baz]]")

        assert [link.title for link in links] == ["Foo", "Baz"]
        assert links[0].alias is None

    def test_alias_of_first_occurrence_is_kept(self) -> None:
        links = extract_wikilinks("[[Foo|first]] then [[Foo|second]]")

        assert links == [WikiLink(title="Foo", alias="first")]

    def test_title_and_alias_are_trimmed(self) -> None:
        links = extract_wikilinks("[[  Spaced Title  |  shown text ]]")

        assert links == [WikiLink(title="Spaced Title", alias="shown text")]

    def test_deduplication_is_case_sensitive(self) -> None:
        links = extract_wikilinks("[[python]] [[Python]]")

        assert [link.title for link in links] == ["python", "Python"]

    def test_order_is_left_to_right(self) -> None:
        links = extract_wikilinks("[[C]] [[A]] [[B]]")
        assert [link.title for link in links] == ["C", "A", "B"]

    @pytest.mark.parametrize("content", ["", None, "no links here", "[single]"])
    def test_no_references(self, content: str | None) -> None:
        assert extract_wikilinks(content) == []

    @pytest.mark.parametrize(
        "content",
        [
            "[[unclosed",
            "unopened]]",
            "[[]]",
            "[[|alias only]]",
            "[ [spaced] ]",
        ],
    )
    def test_malformed_markers_are_plain_text(self, content: str) -> None:
        assert extract_wikilinks(content) == []

    def test_blank_title_is_skipped(self) -> None:
        assert extract_wikilinks("[[   ]] and [[Real]]") == [WikiLink(title="Real")]

    def test_cyrillic_titles(self) -> None:
        links = extract_wikilinks("Ссылка на [[Тестовая статья|статью]]")

        assert links == [WikiLink(title="Тестовая статья", alias="статью")]

    def test_multiline_content(self) -> None:
        content = "# Heading\n\n- [[First]]\n- [[Second|2nd]]\n\n```\ncode\n```\n"
        assert [link.title for link in extract_wikilinks(content)] == ["First", "Second"]

    def test_iter_matches_keeps_duplicates(self) -> None:
        matches = list(iter_wikilink_matches("[[A]] [[A|x]]"))
        assert [link.title for _, link in matches] == ["A", "A"]


class TestWikiLink:
    """Tests for the WikiLink value object."""

    def test_display_text_prefers_alias(self) -> None:
        assert WikiLink("Title", "Alias").display_text == "Alias"
        assert WikiLink("Title").display_text == "Title"

    def test_slug(self) -> None:
        assert WikiLink("Тестовая статья").slug == "testovaya-statya"

    def test_to_dict(self) -> None:
        assert WikiLink("A", "b").to_dict() == {"title": "A", "alias": "b"}

    def test_is_hashable(self) -> None:
        assert len({WikiLink("A"), WikiLink("A")}) == 1


class TestWikilinksToMarkdown:
    """Tests for the import-time markdown conversion."""

    def test_plain_link(self) -> None:
        assert wikilinks_to_markdown("See [[Hello World]]") == "See [Hello World](/articles/hello-world)"

    def test_aliased_link(self) -> None:
        assert wikilinks_to_markdown("[[Тест|тут]]") == "[тут](/articles/test)"

    def test_custom_base_path(self) -> None:
        assert wikilinks_to_markdown("[[A]]", base_path="/wiki/") == "[A](/wiki/a)"

    def test_text_without_links_is_unchanged(self) -> None:
        text = "nothing [to] convert"
        assert wikilinks_to_markdown(text) == text

    def test_converted_text_has_no_references(self) -> None:
        converted = wikilinks_to_markdown("[[A]] [[B|b]]")
        assert extract_wikilinks(converted) == []
