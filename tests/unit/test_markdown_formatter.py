"""Unit tests for markdown rendering of annotations."""

from src.domain.models.annotation import FormattedAnnotation, ItemAnnotationData
from src.domain.services.color_classifier import GREEN, YELLOW
from src.domain.services.markdown_formatter import (
    MarkdownOptions,
    build_description,
    format_annotations_to_markdown,
)


def _annotation(text: str = "", sort_index: str = "00001", **kwargs) -> FormattedAnnotation:
    defaults = {
        "comment": None,
        "color": "#ffd400",
        "color_emoji": YELLOW,
    }
    defaults.update(kwargs)
    return FormattedAnnotation(text=text, sort_index=sort_index, **defaults)


def _data(*annotations: FormattedAnnotation, **kwargs) -> ItemAnnotationData:
    return ItemAnnotationData(item_key="ITEM1", item_title="Paper", annotations=annotations, **kwargs)


def test_two_highlights_without_metadata():
    data = _data(
        _annotation("A", "00001"),
        _annotation("B", "00002", color="#5fb236", color_emoji=GREEN),
    )

    markdown = format_annotations_to_markdown(data)

    assert markdown == f"## Annotations\n\n> {YELLOW} A\n\n---\n\n> {GREEN} B\n\n---"


def test_metadata_block_is_closed_by_rule():
    data = _data(
        _annotation("A"),
        item_creators="Jane Doe, John Roe",
        item_date="2020",
        item_doi="10.1000/xyz",
    )

    markdown = format_annotations_to_markdown(data)

    assert markdown.startswith(
        "## Annotations\n\n**Authors:** Jane Doe, John Roe\n**Date:** 2020\n**DOI:** 10.1000/xyz\n\n---\n\n"
    )


def test_page_marker_links_to_annotation():
    link = "zotero://open-pdf/library/items/ATT1?page=3&annotation=ANN1"
    data = _data(_annotation("A", page_label="3", zotero_link=link))

    markdown = format_annotations_to_markdown(data)

    assert f"> {YELLOW} A [*(p.3)*]({link})" in markdown


def test_page_marker_without_link():
    data = _data(_annotation("A", page_label="iv"))

    assert f"> {YELLOW} A *(p.iv)*" in format_annotations_to_markdown(data)


def test_multiline_text_is_quoted_line_by_line_with_comment_after():
    data = _data(_annotation("first\nsecond", comment="my thought", page_label="2"))

    markdown = format_annotations_to_markdown(data)

    assert f"> {YELLOW} first *(p.2)*\n> second\n\nmy thought\n\n---" in markdown


def test_image_annotation_renders_figure_reference():
    data = _data(_annotation("", comment="Figure 2 matters", is_image=True, page_label="5"))

    markdown = format_annotations_to_markdown(data)

    assert f"> {YELLOW} \U0001F4F7 Figure annotation *(p.5)*\n\nFigure 2 matters" in markdown


def test_comment_only_note_is_rendered():
    data = _data(_annotation("", comment="standalone note", page_label="7"))

    assert "standalone note *(p.7)*" in format_annotations_to_markdown(data)


def test_tags_line():
    data = _data(_annotation("A", tags=("method", "key-result")))

    assert "Tags: #method #key-result" in format_annotations_to_markdown(data)


def test_options_disable_emoji_pages_and_tags():
    data = _data(_annotation("A", page_label="3", tags=("t",)))
    options = MarkdownOptions(include_page_numbers=False, include_tags=False, use_color_emoji=False)

    markdown = format_annotations_to_markdown(data, options)

    assert markdown == "## Annotations\n\n> A\n\n---"


def test_description_joins_creators_and_date():
    data = _data(item_creators="Jane Doe", item_date="2020-03")
    assert build_description(data) == "Jane Doe (2020-03)"
    assert build_description(_data(item_date="2020")) == "(2020)"
    assert build_description(_data()) == ""


def test_description_is_truncated():
    data = _data(item_creators="x" * 50)
    assert build_description(data, max_length=10) == "x" * 10
