"""Markdown → Unicode styled-text formatter.

Converts a small Markdown subset into Unicode look-alike characters that
render as styled text on social platforms which only accept plain text.

Supported conversions:
    #### tiny heading → small caps, lowercased
    ### / ## heading  → Math Bold, uppercased
    # heading         → Math Sans-Serif Bold, uppercased
    **bold**          → Math Bold
    *italic*          → Math Italic
    ~~strike~~        → U+0336 after every character
    __underline__     → U+0332 after every character
"""

from __future__ import annotations

import re

from textcraft_mcp.glyphs import (
    BOLD,
    CIRCLE,
    EXTRA_BOLD,
    FRAKTUR,
    ITALIC,
    MONOSPACE,
    REVERSE_TABLE,
    SCRIPT,
    SMALL_CAPS,
    STRIKETHROUGH_MARK,
    UNDERLINE_MARK,
    GlyphTable,
)


def transcode(text: str, table: GlyphTable) -> str:
    """Map every character through *table*; unmapped characters pass through."""
    return "".join(table.get(ch, ch) for ch in text)


def decorate(text: str, mark: str) -> str:
    """Append the combining *mark* after every character of *text*."""
    return "".join(ch + mark for ch in text)


def to_bold(text: str) -> str:
    return transcode(text, BOLD)


def to_italic(text: str) -> str:
    return transcode(text, ITALIC)


def to_extra_bold(text: str) -> str:
    return transcode(text, EXTRA_BOLD)


def to_small_caps(text: str) -> str:
    return transcode(text, SMALL_CAPS)


def to_script(text: str) -> str:
    return transcode(text, SCRIPT)


def to_circle(text: str) -> str:
    return transcode(text, CIRCLE)


def to_fraktur(text: str) -> str:
    return transcode(text, FRAKTUR)


def to_monospace(text: str) -> str:
    return transcode(text, MONOSPACE)


def add_strikethrough(text: str) -> str:
    return decorate(text, STRIKETHROUGH_MARK)


def add_underline(text: str) -> str:
    return decorate(text, UNDERLINE_MARK)


# ---------------------------------------------------------------------------
# Whole-text quick styles
# ---------------------------------------------------------------------------

QUICK_STYLES = {
    "bold-serif": to_bold,
    "italic": to_italic,
    "script": to_script,
    "circle": to_circle,
    "fraktur": to_fraktur,
    "monospace": to_monospace,
}


def apply_quick_style(text: str, style: str) -> str:
    """Style the entire text. Unknown styles return the text unchanged."""
    convert = QUICK_STYLES.get(style)
    if convert is None:
        return text
    return convert(text)


_DECORATION_MARKS = re.compile(f"[{STRIKETHROUGH_MARK}{UNDERLINE_MARK}]")


def strip_formatting(text: str) -> str:
    """Undo styling: drop decoration marks and map glyphs back to ASCII."""
    return transcode(_DECORATION_MARKS.sub("", text), REVERSE_TABLE)


# ---------------------------------------------------------------------------
# Markdown subset
# ---------------------------------------------------------------------------

_H4 = re.compile(r"^#### (.+)$", re.MULTILINE)
_H3 = re.compile(r"^### (.+)$", re.MULTILINE)
_H2 = re.compile(r"^## (.+)$", re.MULTILINE)
_H1 = re.compile(r"^# (.+)$", re.MULTILINE)
BOLD_PATTERN = re.compile(r"\*\*(.+?)\*\*")
_ITALIC = re.compile(r"(?<!\*)\*([^*\n]+?)\*(?!\*)")
_STRIKETHROUGH = re.compile(r"~~(.+?)~~")
_UNDERLINE = re.compile(r"__(.+?)__")


def format_text(text: str) -> str:
    """Convert Markdown-subset formatting to Unicode styled text.

    Processing order matters, each pass runs over the output of the last:
    1. #### heading (small caps, lowercased)
    2. ### heading (bold, uppercased)
    3. ## heading (bold, uppercased)
    4. # heading (extra bold, uppercased)
    5. **bold**
    6. *italic* (a lone star, never half of **)
    7. ~~strikethrough~~
    8. __underline__

    Headings need exactly one space after the hashes. Unmatched
    delimiters are left as-is.

    Args:
        text: Input text with optional Markdown formatting.

    Returns:
        Text with formatting replaced by Unicode styled characters.
    """
    text = _H4.sub(lambda m: to_small_caps(m.group(1).lower()), text)
    text = _H3.sub(lambda m: to_bold(m.group(1).upper()), text)
    text = _H2.sub(lambda m: to_bold(m.group(1).upper()), text)
    text = _H1.sub(lambda m: to_extra_bold(m.group(1).upper()), text)

    text = BOLD_PATTERN.sub(lambda m: to_bold(m.group(1)), text)
    text = _ITALIC.sub(lambda m: to_italic(m.group(1)), text)

    text = _STRIKETHROUGH.sub(lambda m: add_strikethrough(m.group(1)), text)
    text = _UNDERLINE.sub(lambda m: add_underline(m.group(1)), text)

    return text
