"""Tests for structural extraction in ``docsgraph.markdown_parser``.

The extractor feeds the table of contents, the search index, and reference
validation, so these tests pin down heading ids, section flushing, plain text
normalization, and the link and image candidates it reports.
"""

from __future__ import annotations

from textwrap import dedent

import pytest

from docsgraph.errors import DuplicateHeadingIdError
from docsgraph.markdown_parser import (
    extract_document,
    heading_slug,
    normalize_fenced_blocks,
)
from docsgraph.models import SearchSection, TableOfContentsHeading

SECTIONED_BODY = dedent(
    """\
    # Guide

    Intro paragraph.

    ## Install

    Run `pip install`.

    ## Empty

    ### Deep Dive

    Details here.
    """
)


def test_headings_cover_levels_two_to_six() -> None:
    """Only level 2-6 headings reach the table of contents."""
    doc = extract_document(SECTIONED_BODY, "guide.md")

    assert doc.headings == [
        TableOfContentsHeading(id="install", title="Install", level=2),
        TableOfContentsHeading(id="empty", title="Empty", level=2),
        TableOfContentsHeading(id="deep-dive", title="Deep Dive", level=3),
    ], f"unexpected headings {doc.headings!r}"
    assert doc.primary_title == "Guide", "first level-1 heading is the title"
    assert "guide" in doc.heading_anchors, "level-1 ids are still reserved"


def test_sections_skip_headings_without_text() -> None:
    """Headings with no following text produce no search section."""
    doc = extract_document(SECTIONED_BODY, "guide.md")

    assert doc.search_sections == [
        SearchSection(heading="Guide", anchor="guide", text="Intro paragraph."),
        SearchSection(heading="Install", anchor="install", text="Run pip install."),
        SearchSection(heading="Deep Dive", anchor="deep-dive", text="Details here."),
    ], f"unexpected sections {doc.search_sections!r}"


def test_text_before_first_heading_forms_anonymous_section() -> None:
    """Leading text is kept with an empty heading and anchor."""
    doc = extract_document("Preamble text.\n\n## Next\n\nMore.\n", "a.md")

    assert doc.search_sections[0] == SearchSection(
        heading="", anchor="", text="Preamble text."
    ), "preamble should be its own section"


def test_plain_text_collapses_blocks_and_whitespace() -> None:
    """Block boundaries become single spaces in the document text."""
    doc = extract_document(SECTIONED_BODY, "guide.md")

    assert doc.plain_text == (
        "Guide Intro paragraph. Install Run pip install. Empty Deep Dive "
        "Details here."
    ), f"unexpected plain text {doc.plain_text!r}"


def test_plain_text_drops_raw_html_and_decodes_entities() -> None:
    """Inline tags vanish and entities become characters."""
    doc = extract_document(
        "Text with <span>inline</span> html &amp; more.\n", "a.md"
    )

    assert doc.plain_text == "Text with inline html & more.", (
        f"unexpected plain text {doc.plain_text!r}"
    )


def test_image_alt_text_is_searchable() -> None:
    """Alt text counts as document text."""
    doc = extract_document("See ![Architecture diagram](img/arch.png).\n", "a.md")

    assert "Architecture diagram" in doc.plain_text, "alt text should be included"


def test_fenced_code_contents_are_part_of_the_text() -> None:
    """Code blocks contribute their literal contents."""
    doc = extract_document("```python\nprint(1 < 2)\n```\n", "a.md")

    assert "print(1 < 2)" in doc.plain_text, "code should be unescaped text"


def test_links_and_images_are_reported_as_candidates() -> None:
    """Only local markdown links and relative images are candidates."""
    body = dedent(
        """\
        Read [usage](../cli/usage.md#flags), [home](https://example.com),
        and [top](#top).

        ![Diagram](img/d.png) ![Remote](https://cdn.test/x.png)
        """
    )

    doc = extract_document(body, "patcher/intro.md")

    assert [link.full_href for link in doc.links] == ["../cli/usage.md#flags"], (
        "external and same-page links should be ignored"
    )
    assert doc.links[0].hash == "flags", "fragment should be kept"
    assert [image.target_path for image in doc.images] == ["img/d.png"], (
        "remote images should be ignored"
    )


def test_links_inside_headings_and_lists_are_found() -> None:
    """Candidates are collected at any depth."""
    body = "## See [setup](setup.md)\n\n- item with [cli](cli/)\n"

    doc = extract_document(body, "index.md")

    assert [link.target_path for link in doc.links] == ["setup.md", "cli/README.md"]


@pytest.mark.parametrize(
    "body",
    [
        "## Setup\n\nA.\n\n## Setup\n\nB.\n",
        "# Setup\n\n## Setup\n",
        "## Fish & Chips\n\n## Fish  Chips\n",
    ],
)
def test_duplicate_heading_ids_fail(body: str) -> None:
    """Two headings mapping to the same id are rejected."""
    with pytest.raises(DuplicateHeadingIdError, match="Duplicate heading id"):
        extract_document(body, "dup.md")


def test_heading_slug_keeps_word_characters() -> None:
    """Punctuation is dropped and spaces become hyphens without collapsing."""
    assert heading_slug("What's New in v2.0?") == "whats-new-in-v20"
    assert heading_slug("API_Reference") == "api_reference", "underscores survive"


def test_normalize_fenced_blocks_dedents_and_drops_attributes() -> None:
    """Indented fences and attribute suffixes are normalized."""
    text = "  ```rust,no_run\nfn main() {}\n  ```\n"

    assert normalize_fenced_blocks(text) == "```rust\nfn main() {}\n```\n"
