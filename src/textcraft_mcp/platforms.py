"""Supported social platforms and their post length limits."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Platform:
    id: str
    name: str
    char_limit: int


PLATFORMS: tuple[Platform, ...] = (
    Platform("twitter", "Twitter / X", 280),
    Platform("instagram", "Instagram", 2200),
    Platform("linkedin", "LinkedIn", 3000),
    Platform("facebook", "Facebook", 63206),
    Platform("tiktok", "TikTok", 2200),
    Platform("threads", "Threads", 500),
)

_ALIASES = {"x": "twitter"}

_BY_ID = {platform.id: platform for platform in PLATFORMS}


def get_platform(platform_id: str) -> Platform | None:
    """Look up a platform by id ("x" is accepted for twitter)."""
    key = platform_id.strip().lower()
    return _BY_ID.get(_ALIASES.get(key, key))


def char_limit_for(platform_id: str | None, default: int) -> int:
    if not platform_id:
        return default
    platform = get_platform(platform_id)
    return platform.char_limit if platform else default
