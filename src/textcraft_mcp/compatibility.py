"""Rendering compatibility and screen-reader accessibility heuristics.

Styled glyphs show up as empty boxes on some platform/device combinations
and are read letter-by-letter (or skipped) by screen readers. These checks
estimate both from the code points a formatted post contains.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from textcraft_mcp.counter import (
    codepoint_length,
    count_combining_marks,
    count_formatted,
)
from textcraft_mcp.platforms import PLATFORMS

# Code point ranges known to render badly on each platform
PLATFORM_ISSUES: dict[str, tuple[tuple[int, int], ...]] = {
    "twitter": ((0x1F900, 0x1F9FF),),  # newer emoji
    "instagram": ((0x24B6, 0x24EA),),  # enclosed alphanumerics on old Android
    "facebook": ((0x1D400, 0x1D7FF),),  # math symbols on some mobile clients
    "tiktok": ((0xFF01, 0xFF5E),),  # fullwidth forms
    "linkedin": ((0x1D400, 0x1D7FF),),  # heavy styling flagged by ranking
    "threads": (),
}

COMPATIBLE_THRESHOLD = 95
LINKEDIN_HEAVY_FORMATTING_RATIO = 0.2


@dataclass(frozen=True)
class PlatformCompatibility:
    platform: str
    platform_name: str
    compatible: bool
    support_percentage: int
    issues: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AccessibilityScore:
    score: int
    status: str
    message: str


def _count_in_ranges(text: str, ranges: tuple[tuple[int, int], ...]) -> int:
    count = 0
    for ch in text:
        cp = ord(ch)
        if any(start <= cp <= end for start, end in ranges):
            count += 1
    return count


def check_platform_compatibility(text: str) -> list[PlatformCompatibility]:
    """Estimate per-platform support for the styled characters in *text*."""
    total_formatted = count_formatted(text)
    length = codepoint_length(text)
    results = []
    for platform in PLATFORMS:
        unsupported = _count_in_ranges(text, PLATFORM_ISSUES.get(platform.id, ()))
        if total_formatted > 0:
            support = round((total_formatted - unsupported) / total_formatted * 100)
        else:
            support = 100

        issues = []
        if unsupported > 0:
            issues.append(f"{unsupported} characters may not display correctly")
        if (
            platform.id == "linkedin"
            and total_formatted > length * LINKEDIN_HEAVY_FORMATTING_RATIO
        ):
            issues.append("Heavy formatting may reduce reach")
        if platform.id == "twitter" and length > platform.char_limit:
            issues.append("Exceeds character limit")

        results.append(
            PlatformCompatibility(
                platform=platform.id,
                platform_name=platform.name,
                compatible=support >= COMPATIBLE_THRESHOLD,
                support_percentage=support,
                issues=issues,
            )
        )
    return results


def compatibility_summary(text: str) -> dict:
    """Average support, whether any platform has issues, and the worst one."""
    results = check_platform_compatibility(text)
    avg_support = round(sum(r.support_percentage for r in results) / len(results))
    has_issues = any(not r.compatible for r in results)
    worst = min(results, key=lambda r: r.support_percentage)
    return {
        "avg_support": avg_support,
        "has_issues": has_issues,
        "worst_platform": worst.platform_name if has_issues else None,
    }


def accessibility_score(text: str) -> AccessibilityScore:
    """Score 0-100 for how well a screen reader copes with *text*.

    Styled letters and combining marks are counted against the total;
    the more of the post they make up, the bigger the deduction.
    """
    if not text.strip():
        return AccessibilityScore(100, "excellent", "Accessible to screen readers")

    styled = count_formatted(text) + count_combining_marks(text)
    share = styled / codepoint_length(text) * 100

    score = 100
    if share > 50:
        score -= 60
    elif share > 30:
        score -= 40
    elif share > 10:
        score -= 20

    if score >= 80:
        return AccessibilityScore(score, "excellent", "Accessible to screen readers")
    if score >= 60:
        return AccessibilityScore(score, "good", "Mostly accessible with minor issues")
    # Largest deduction is 60, so the score never drops below 40.
    return AccessibilityScore(score, "fair", "May be difficult for screen readers")
