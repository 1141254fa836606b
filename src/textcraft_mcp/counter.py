"""Unicode-aware character counting and styled-codepoint classification.

Platforms count code points, not UTF-16 units: a Math Bold letter is one
character to the user even though JavaScript's ``.length`` reports two.
"""

from __future__ import annotations

from dataclasses import dataclass

# (start, end, block name), inclusive ranges of "styled" code points
FORMATTED_RANGES: tuple[tuple[int, int, str], ...] = (
    (0x1D400, 0x1D7FF, "Mathematical Alphanumeric Symbols"),
    (0x24B6, 0x24EA, "Enclosed Alphanumerics"),
    (0xFF01, 0xFF5E, "Fullwidth Forms"),
    (0x1F100, 0x1F1FF, "Enclosed Alphanumeric Supplement"),
)

COMBINING_MARKS_RANGE = (0x0300, 0x036F)


@dataclass(frozen=True)
class CodepointClass:
    formatted: bool
    block: str | None = None


@dataclass(frozen=True)
class CharacterCount:
    """Character usage against a platform limit."""

    plain_text_count: int  # UTF-16 code units
    unicode_count: int  # code points
    platform_limit: int
    percentage: float


def codepoint_length(text: str) -> int:
    """Number of Unicode scalar values in *text*."""
    return len(text)


def utf16_length(text: str) -> int:
    """Number of UTF-16 code units, i.e. what a naive JS counter reports."""
    return len(text.encode("utf-16-le")) // 2


def classify_codepoint(cp: int) -> CodepointClass:
    """Report whether *cp* falls inside a styled Unicode block."""
    for start, end, block in FORMATTED_RANGES:
        if start <= cp <= end:
            return CodepointClass(formatted=True, block=block)
    return CodepointClass(formatted=False)


def count_formatted(text: str) -> int:
    """Count code points that belong to a styled block."""
    return sum(1 for ch in text if classify_codepoint(ord(ch)).formatted)


def count_combining_marks(text: str) -> int:
    start, end = COMBINING_MARKS_RANGE
    return sum(1 for ch in text if start <= ord(ch) <= end)


def count_characters(text: str, platform_limit: int) -> CharacterCount:
    unicode_count = codepoint_length(text)
    percentage = (unicode_count / platform_limit) * 100 if platform_limit > 0 else 0.0
    return CharacterCount(
        plain_text_count=utf16_length(text),
        unicode_count=unicode_count,
        platform_limit=platform_limit,
        percentage=percentage,
    )


def counter_color(percentage: float) -> str:
    """Traffic-light colour for a usage percentage."""
    if percentage < 80:
        return "#10B981"  # green
    if percentage < 95:
        return "#F59E0B"  # amber
    return "#EF4444"  # red
