"""Glyph tables: ASCII → Unicode styled-letter substitution maps.

Each table maps A-Z, a-z and (where the Unicode block has them) 0-9 to a
single styled code point. Characters missing from a table pass through
the transcoder unchanged.

    BOLD        → Math Bold                    (U+1D400 block)
    ITALIC      → Math Italic / Sans Italic    (U+1D434 / U+1D622)
    EXTRA_BOLD  → Math Sans-Serif Bold         (U+1D5D4 block)
    SMALL_CAPS  → IPA / phonetic small capitals
    SCRIPT      → Math Script                  (U+1D49C block)
    CIRCLE      → Enclosed Alphanumerics       (U+24B6 block)
    FRAKTUR     → Math Fraktur                 (U+1D504 block)
    MONOSPACE   → Math Monospace               (U+1D670 block)
"""

from __future__ import annotations

import string
from types import MappingProxyType
from typing import Mapping

GlyphTable = Mapping[str, str]

# Combining marks appended after every base character
STRIKETHROUGH_MARK = "\u0336"
UNDERLINE_MARK = "\u0332"

# ---------------------------------------------------------------------------
# Block start offsets
# ---------------------------------------------------------------------------

# Math Bold (serif): U+1D400 (A) .. U+1D433
_BOLD_UPPER_START = 0x1D400  # 𝐀
_BOLD_LOWER_START = 0x1D41A  # 𝐚
_BOLD_DIGIT_START = 0x1D7CE  # 𝟎

# Italic mixes Math Italic capitals with Math Sans-Serif Italic lowercase.
# No italic digits in Unicode standard
_ITALIC_UPPER_START = 0x1D434  # 𝐴
_ITALIC_LOWER_START = 0x1D622  # 𝘢

# Math Sans-Serif Bold: U+1D5D4 (A) .. U+1D607
_EXTRA_BOLD_UPPER_START = 0x1D5D4  # 𝗔
_EXTRA_BOLD_LOWER_START = 0x1D5EE  # 𝗮
_EXTRA_BOLD_DIGIT_START = 0x1D7EC  # 𝟬

# Math Script: U+1D49C (A) .. U+1D4CF, with reserved holes
_SCRIPT_UPPER_START = 0x1D49C  # 𝒜
_SCRIPT_LOWER_START = 0x1D4B6  # 𝒶

# Circled Latin: U+24B6 (Ⓐ) .. U+24E9 (ⓩ)
_CIRCLE_UPPER_START = 0x24B6  # Ⓐ
_CIRCLE_LOWER_START = 0x24D0  # ⓐ

# Math Fraktur: U+1D504 (A) .. U+1D537, with reserved holes
_FRAKTUR_UPPER_START = 0x1D504  # 𝔄
_FRAKTUR_LOWER_START = 0x1D51E  # 𝔞

# Math Monospace: U+1D670 (A) .. U+1D6A3
_MONO_UPPER_START = 0x1D670  # 𝙰
_MONO_LOWER_START = 0x1D68A  # 𝚊
_MONO_DIGIT_START = 0x1D7F6  # 𝟶

# Letters whose Math Alphanumeric slot is reserved; the glyph lives in
# the Letterlike Symbols block instead.
_SCRIPT_HOLES = {
    "B": "\u212C",  # ℬ
    "E": "\u2130",  # ℰ
    "F": "\u2131",  # ℱ
    "H": "\u210B",  # ℋ
    "I": "\u2110",  # ℐ
    "L": "\u2112",  # ℒ
    "M": "\u2133",  # ℳ
    "R": "\u211B",  # ℛ
    "e": "\u212F",  # ℯ
    "g": "\u210A",  # ℊ
    "o": "\u2134",  # ℴ
}

_FRAKTUR_HOLES = {
    "C": "\u212D",  # ℭ
    "H": "\u210C",  # ℌ
    "I": "\u2111",  # ℑ
    "R": "\u211C",  # ℜ
    "Z": "\u2128",  # ℨ
}

# a-z in order. 's' and 'x' have no small-capital form and stay as-is.
_SMALL_CAPS_ALPHABET = "ᴀʙᴄᴅᴇғɢʜɪᴊᴋʟᴍɴᴏᴘǫʀsᴛᴜᴠᴡxʏᴢ"


def _build_table(
    upper_start: int,
    lower_start: int,
    digit_start: int | None = None,
    holes: Mapping[str, str] | None = None,
) -> GlyphTable:
    """Build a read-only table from contiguous block offsets."""
    table: dict[str, str] = {}
    for i, ch in enumerate(string.ascii_uppercase):
        table[ch] = chr(upper_start + i)
    for i, ch in enumerate(string.ascii_lowercase):
        table[ch] = chr(lower_start + i)
    if digit_start is not None:
        for i, ch in enumerate(string.digits):
            table[ch] = chr(digit_start + i)
    if holes:
        table.update(holes)
    return MappingProxyType(table)


def _build_small_caps() -> GlyphTable:
    table = dict(zip(string.ascii_lowercase, _SMALL_CAPS_ALPHABET))
    table.update(zip(string.ascii_uppercase, _SMALL_CAPS_ALPHABET))
    return MappingProxyType(table)


BOLD = _build_table(_BOLD_UPPER_START, _BOLD_LOWER_START, _BOLD_DIGIT_START)
ITALIC = _build_table(_ITALIC_UPPER_START, _ITALIC_LOWER_START)
EXTRA_BOLD = _build_table(
    _EXTRA_BOLD_UPPER_START, _EXTRA_BOLD_LOWER_START, _EXTRA_BOLD_DIGIT_START
)
SMALL_CAPS = _build_small_caps()
SCRIPT = _build_table(_SCRIPT_UPPER_START, _SCRIPT_LOWER_START, holes=_SCRIPT_HOLES)
CIRCLE = _build_table(_CIRCLE_UPPER_START, _CIRCLE_LOWER_START)
FRAKTUR = _build_table(
    _FRAKTUR_UPPER_START, _FRAKTUR_LOWER_START, holes=_FRAKTUR_HOLES
)
MONOSPACE = _build_table(_MONO_UPPER_START, _MONO_LOWER_START, _MONO_DIGIT_START)

TABLES: Mapping[str, GlyphTable] = MappingProxyType({
    "bold": BOLD,
    "italic": ITALIC,
    "extra_bold": EXTRA_BOLD,
    "small_caps": SMALL_CAPS,
    "script": SCRIPT,
    "circle": CIRCLE,
    "fraktur": FRAKTUR,
    "monospace": MONOSPACE,
})


def _build_reverse_table() -> GlyphTable:
    """Styled glyph → ASCII source, across every table.

    Small capitals are shared by both cases and map back to lowercase.
    Identity entries ('s', 'x' in small caps) are skipped.
    """
    reverse: dict[str, str] = {}
    for table in TABLES.values():
        for source, glyph in table.items():
            if glyph == source.lower():
                continue
            reverse.setdefault(glyph, source.lower() if table is SMALL_CAPS else source)
    return MappingProxyType(reverse)


REVERSE_TABLE = _build_reverse_table()
