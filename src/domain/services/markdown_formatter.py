"""Render extracted annotations as Capacities-compatible markdown."""

from __future__ import annotations

from dataclasses import dataclass

from ..models.annotation import FormattedAnnotation, ItemAnnotationData

FIGURE_LABEL = "\U0001F4F7 Figure annotation"
RULE = "---"


@dataclass(frozen=True)
class MarkdownOptions:
    """Formatting toggles, all enabled by default."""

    include_page_numbers: bool = True
    include_tags: bool = True
    use_color_emoji: bool = True


def format_annotations_to_markdown(
    data: ItemAnnotationData,
    options: MarkdownOptions | None = None,
) -> str:
    """
    Convert an item's annotations to markdown.

    Layout:
        ## Annotations
        optional metadata (authors, date, DOI) closed by a rule
        per annotation: quoted text (emoji + page link on the first line),
        comment paragraph, optional tag line, closing rule

    Args:
        data: Aggregated annotation data, already sorted
        options: Formatting toggles (defaults: everything enabled)

    Returns:
        Markdown text with surrounding whitespace trimmed
    """
    options = options or MarkdownOptions()
    lines: list[str] = ["## Annotations", ""]

    metadata = [
        ("Authors", data.item_creators),
        ("Date", data.item_date),
        ("DOI", data.item_doi),
    ]
    emitted = False
    for label, value in metadata:
        if value:
            lines.append(f"**{label}:** {value}")
            emitted = True
    if emitted:
        lines.extend(["", RULE, ""])

    for annotation in data.annotations:
        lines.extend(_format_annotation(annotation, options))

    return "\n".join(lines).strip()


def _page_marker(annotation: FormattedAnnotation, options: MarkdownOptions) -> str:
    if not (options.include_page_numbers and annotation.page_label):
        return ""
    marker = f"*(p.{annotation.page_label})*"
    if annotation.zotero_link:
        return f" [{marker}]({annotation.zotero_link})"
    return f" {marker}"


def _format_annotation(annotation: FormattedAnnotation, options: MarkdownOptions) -> list[str]:
    lines: list[str] = []
    color_prefix = f"{annotation.color_emoji} " if options.use_color_emoji else ""
    page_info = _page_marker(annotation, options)

    if annotation.is_image:
        lines.append(f"> {color_prefix}{FIGURE_LABEL}{page_info}")
        if annotation.comment:
            lines.extend(["", annotation.comment])
    elif annotation.text:
        quote_lines = annotation.text.split("\n")
        quoted = [f"> {line}" for line in quote_lines]
        quoted[0] = f"> {color_prefix}{quote_lines[0]}{page_info}"
        lines.append("\n".join(quoted))
        if annotation.comment:
            lines.extend(["", annotation.comment])
    elif annotation.comment:
        # Comment-only note: no quote to hang the markers on
        lines.append(f"{annotation.comment}{page_info}")

    if options.include_tags and annotation.tags:
        lines.extend(["", "Tags: " + " ".join(f"#{tag}" for tag in annotation.tags)])

    lines.extend(["", RULE, ""])
    return lines


def build_description(data: ItemAnnotationData, max_length: int = 1000) -> str:
    """Build the weblink description: creators followed by the parenthesized date."""
    parts: list[str] = []
    if data.item_creators:
        parts.append(data.item_creators)
    if data.item_date:
        parts.append(f"({data.item_date})")
    return " ".join(parts)[:max_length]
