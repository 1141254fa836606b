"""Render validated format blocks into final styled text.

Every text-bearing block goes through the same two steps before its
layout is applied: ``**bold**`` stars are converted, then highlight spans
are styled. Rendered blocks are joined with a blank line.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Sequence

from textcraft_mcp.blocks import HighlightSpan
from textcraft_mcp.formatter import (
    BOLD_PATTERN,
    add_underline,
    to_bold,
    to_extra_bold,
    to_italic,
)

SEPARATOR = "\u2014" * 21  # em dashes
BLOCK_JOINER = "\n\n"

_HIGHLIGHT_STYLES: dict[str, Callable[[str], str]] = {
    "bold": to_bold,
    "italic": to_italic,
    "underline": add_underline,
}


def process_markdown_stars(text: str) -> str:
    """Convert ``**bold**`` spans to Math Bold."""
    return BOLD_PATTERN.sub(lambda m: to_bold(m.group(1)), text)


def apply_highlights(text: str, highlights: Iterable[HighlightSpan] | None) -> str:
    """Style the first occurrence of each highlight span.

    Longest spans go first so a short span that is a substring of a
    longer one cannot split it. A span whose text is no longer present
    (never was, or already consumed) is skipped.
    """
    if not highlights:
        return text
    for span in sorted(highlights, key=lambda h: len(h.text), reverse=True):
        if not span.text:
            continue
        start = text.find(span.text)
        if start == -1:
            continue
        style = _HIGHLIGHT_STYLES.get(span.style or "bold", to_bold)
        end = start + len(span.text)
        text = text[:start] + style(span.text) + text[end:]
    return text


def _inline(text: str, highlights: Sequence[HighlightSpan]) -> str:
    return apply_highlights(process_markdown_stars(text), highlights)


def _render_heading(block: Any) -> str:
    return to_extra_bold(_inline(block.text, block.highlights).upper())


def _render_subheading(block: Any) -> str:
    return add_underline(to_bold(_inline(block.text, block.highlights)))


def _render_paragraph(block: Any) -> str:
    return _inline(block.text, block.highlights)


def _render_cta(block: Any) -> str:
    return to_bold(_inline(block.text, block.highlights))


def _render_bullets(block: Any) -> str:
    return "\n".join(f"• {_inline(item, block.highlights)}" for item in block.items)


def _render_numbered(block: Any) -> str:
    return "\n".join(
        f"{index}. {_inline(item, block.highlights)}"
        for index, item in enumerate(block.items, start=1)
    )


def _render_hashtags(block: Any) -> str:
    tags = (item if item.startswith("#") else f"#{item}" for item in block.items)
    return " ".join(_inline(tag, block.highlights) for tag in tags)


def _render_separator(block: Any) -> str:
    return SEPARATOR


_TEXT_RENDERERS = {
    "heading": _render_heading,
    "subheading": _render_subheading,
    "paragraph": _render_paragraph,
    "cta": _render_cta,
}

_ITEM_RENDERERS = {
    "bullets": _render_bullets,
    "numbered": _render_numbered,
    "hashtags": _render_hashtags,
}


def render_block(block: Any) -> str:
    """Render one block. Returns "" when there is nothing to show.

    Blocks with empty text or an empty item list render to nothing, as
    does an unknown block type without text.
    """
    block_type = getattr(block, "type", None)
    if block_type == "separator":
        return _render_separator(block)

    if block_type in _ITEM_RENDERERS:
        if not block.items:
            return ""
        return _ITEM_RENDERERS[block_type](block)

    text = getattr(block, "text", None)
    if not text:
        return ""
    renderer = _TEXT_RENDERERS.get(block_type)
    if renderer is None:
        return _inline(text, getattr(block, "highlights", None) or [])
    return renderer(block)


def render_blocks(blocks: Iterable[Any]) -> str:
    """Render blocks in order and join them with a blank line."""
    parts = (render_block(block) for block in blocks)
    return BLOCK_JOINER.join(part for part in parts if part)
