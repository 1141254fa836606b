"""TextCraft-mcp: FastMCP server for Unicode-styled social media text.

Pure formatting tools (Markdown → Unicode, block rendering, counting,
compatibility) need no configuration. The AI tools call an external
language model and need GROQ_API_KEY.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from fastmcp import FastMCP

logger = logging.getLogger(__name__)

mcp = FastMCP("TextCraft")

DEFAULT_SHORTEN_LIMIT = 280

# ---------------------------------------------------------------------------
# Settings singleton
# ---------------------------------------------------------------------------

_settings = None


def get_settings():
    """Get or create the Settings singleton."""
    global _settings
    if _settings is not None:
        return _settings
    from textcraft_mcp.config import Settings

    _settings = Settings()
    return _settings


# ---------------------------------------------------------------------------
# Caller identity
# ---------------------------------------------------------------------------


def _get_current_user_id() -> str | None:
    """Extract FastMCP Cloud user ID from request headers.

    Returns None in STDIO mode (local dev) or when no auth headers present.
    """
    try:
        from fastmcp.server.dependencies import get_http_headers

        headers = get_http_headers(include_all=True)
        return headers.get("fastmcp-cloud-user")
    except Exception:
        return None


def _rate_limit_key() -> str:
    return _get_current_user_id() or "stdio:0"


# ---------------------------------------------------------------------------
# LLM client + rate limiter singletons
# ---------------------------------------------------------------------------

_llm_client = None
_format_limiter = None
_shorten_limiter = None


def _get_llm_client():
    """Get or create the LLMClient singleton.

    Raises ValueError if no API key is configured.
    """
    global _llm_client
    if _llm_client is not None:
        return _llm_client
    from textcraft_mcp.llm_client import LLMClient

    settings = get_settings()
    if not settings.groq_api_key:
        raise ValueError("AI service not configured. Set GROQ_API_KEY.")

    _llm_client = LLMClient(
        settings.groq_api_key,
        api_url=settings.groq_api_url,
        model=settings.groq_model,
        timeout=settings.llm_timeout_seconds,
    )
    return _llm_client


def _get_format_limiter():
    global _format_limiter
    if _format_limiter is None:
        from textcraft_mcp.rate_limit import RateLimiter

        settings = get_settings()
        _format_limiter = RateLimiter(
            settings.format_rate_limit, settings.rate_limit_window_seconds
        )
    return _format_limiter


def _get_shorten_limiter():
    global _shorten_limiter
    if _shorten_limiter is None:
        from textcraft_mcp.rate_limit import RateLimiter

        settings = get_settings()
        _shorten_limiter = RateLimiter(
            settings.shorten_rate_limit, settings.rate_limit_window_seconds
        )
    return _shorten_limiter


def _check_rate_limit(limiter) -> dict[str, Any] | None:
    """Return an error dict when the caller is over the limit."""
    limiter.cleanup()
    key = _rate_limit_key()
    if not limiter.allow(key):
        logger.info("Rate limit exceeded for %s", key)
        return {
            "success": False,
            "error": "Rate limit exceeded. Please try again later.",
        }
    return None


# ---------------------------------------------------------------------------
# MCP Tools: Formatting
# ---------------------------------------------------------------------------


@mcp.tool()
async def health() -> dict:
    """Health check. Returns service version and status."""
    from textcraft_mcp import __version__

    return {
        "service": "textcraft-mcp",
        "version": __version__,
        "status": "ok",
        "ai_configured": bool(get_settings().groq_api_key),
    }


@mcp.tool()
async def format_text(text: str) -> dict[str, Any]:
    """Convert Markdown-style formatting to Unicode styled text.

    Supported markup (unmatched delimiters are left as-is):

        # Heading         → 𝗛𝗘𝗔𝗗𝗜𝗡𝗚 (extra bold, uppercased)
        ## / ### Heading  → 𝐇𝐄𝐀𝐃𝐈𝐍𝐆 (bold, uppercased)
        #### Heading      → ʜᴇᴀᴅɪɴɢ (small caps)
        **bold**          → 𝐛𝐨𝐥𝐝
        *italic*          → 𝘪𝘵𝘢𝘭𝘪𝘤
        ~~strike~~        → s̶t̶r̶i̶k̶e̶
        __underline__     → u̲n̲d̲e̲r̲l̲i̲n̲e̲

    Args:
        text: Post content with optional Markdown formatting.

    Returns:
        formatted_text: The Unicode-styled text, ready to paste.
        char_count: Length in code points (what platforms count).
    """
    from textcraft_mcp.counter import codepoint_length
    from textcraft_mcp.formatter import format_text as _format_text

    formatted = _format_text(text)
    return {
        "success": True,
        "formatted_text": formatted,
        "char_count": codepoint_length(formatted),
    }


@mcp.tool()
async def apply_style(
    text: str,
    style: Literal["bold-serif", "italic", "script", "circle", "fraktur", "monospace"],
) -> dict[str, Any]:
    """Restyle the whole text in one Unicode font.

    Args:
        text: Plain text to style.
        style: One of bold-serif, italic, script, circle, fraktur, monospace.
    """
    from textcraft_mcp.formatter import QUICK_STYLES, apply_quick_style

    if style not in QUICK_STYLES:
        return {
            "success": False,
            "error": f"Unknown style {style!r}. Choose one of: {', '.join(QUICK_STYLES)}",
        }
    return {"success": True, "formatted_text": apply_quick_style(text, style)}


@mcp.tool()
async def strip_formatting(text: str) -> dict[str, Any]:
    """Convert Unicode-styled text back to plain ASCII letters.

    Args:
        text: Text containing styled glyphs or strikethrough/underline marks.
    """
    from textcraft_mcp.formatter import strip_formatting as _strip

    return {"success": True, "plain_text": _strip(text)}


@mcp.tool()
async def render_blocks(blocks: list[dict[str, Any]]) -> dict[str, Any]:
    """Render structured content blocks into styled text.

    Block types: heading, subheading, paragraph, cta (need "text");
    bullets, numbered, hashtags (need "items"); separator. Any block may
    carry "highlights": [{"text": <exact substring>, "style":
    "bold"|"italic"|"underline"}].

    Args:
        blocks: Ordered list of block objects.
    """
    from textcraft_mcp.blocks import FormatValidationError, parse_blocks
    from textcraft_mcp.counter import codepoint_length
    from textcraft_mcp.renderer import render_blocks as _render

    try:
        validated = parse_blocks(blocks)
    except FormatValidationError as exc:
        return {"success": False, "error": str(exc)}

    rendered = _render(validated)
    return {
        "success": True,
        "formatted_text": rendered,
        "char_count": codepoint_length(rendered),
    }


@mcp.tool()
async def character_count(text: str, platform: str = "twitter") -> dict[str, Any]:
    """Count characters the way social platforms do (code points).

    Args:
        text: The (formatted) post text.
        platform: twitter/x, instagram, linkedin, facebook, tiktok, threads.
    """
    from textcraft_mcp.counter import count_characters, count_formatted, counter_color
    from textcraft_mcp.platforms import get_platform

    target = get_platform(platform)
    if target is None:
        return {"success": False, "error": f"Unknown platform {platform!r}"}

    count = count_characters(text, target.char_limit)
    return {
        "success": True,
        "platform": target.id,
        "plain_text_count": count.plain_text_count,
        "unicode_count": count.unicode_count,
        "platform_limit": count.platform_limit,
        "percentage": round(count.percentage, 1),
        "over_limit": count.unicode_count > count.platform_limit,
        "formatted_chars": count_formatted(text),
        "color": counter_color(count.percentage),
    }


@mcp.tool()
async def check_compatibility(text: str) -> dict[str, Any]:
    """Estimate how well styled text renders on each platform and for screen readers.

    Args:
        text: The (formatted) post text.
    """
    from dataclasses import asdict

    from textcraft_mcp.compatibility import (
        accessibility_score,
        check_platform_compatibility,
        compatibility_summary,
    )

    return {
        "success": True,
        "platforms": [asdict(r) for r in check_platform_compatibility(text)],
        "summary": compatibility_summary(text),
        "accessibility": asdict(accessibility_score(text)),
    }


# ---------------------------------------------------------------------------
# MCP Tools: AI
# ---------------------------------------------------------------------------


@mcp.tool()
async def ai_format(text: str, platforms: list[str] | None = None) -> dict[str, Any]:
    """Let the language model split text into blocks, then render them.

    The model only groups the user's own words into headings, paragraphs,
    lists, CTA and hashtags; it does not rewrite. If the model fails or
    returns malformed blocks twice, the original text is returned as a
    single plain paragraph and ``fallback`` is True.

    Args:
        text: The raw post text (max 8000 characters).
        platforms: Platforms to format for (default: facebook).

    Returns:
        results: Per platform, the validated blocks and the rendered text.
        fallback: True if the plain-text fallback was used.
    """
    from textcraft_mcp.ai_service import request_format, validate_input_text
    from textcraft_mcp.blocks import DEFAULT_PLATFORM, dump_blocks
    from textcraft_mcp.counter import codepoint_length
    from textcraft_mcp.platforms import char_limit_for
    from textcraft_mcp.renderer import render_blocks as _render

    settings = get_settings()
    error = validate_input_text(text, settings.max_input_chars)
    if error:
        return {"success": False, "error": error}

    try:
        client = _get_llm_client()
    except ValueError as e:
        return {"success": False, "error": str(e)}

    gate = _check_rate_limit(_get_format_limiter())
    if gate is not None:
        return gate

    result = await request_format(client, text, platforms or [DEFAULT_PLATFORM])

    posts = []
    for post in result.response.results:
        rendered = _render(post.blocks)
        posts.append({
            "platform": post.platform,
            "blocks": dump_blocks(post.blocks),
            "formatted_text": rendered,
            "char_count": codepoint_length(rendered),
            "char_limit": char_limit_for(post.platform, default=DEFAULT_SHORTEN_LIMIT),
        })

    return {
        "success": True,
        "fallback": result.fallback,
        "attempts": result.attempts,
        "results": posts,
    }


@mcp.tool()
async def ai_shorten(
    text: str,
    platform: str | None = None,
    max_chars: int | None = None,
    keep_hashtags: bool = True,
    keep_cta: bool = True,
    tone: Literal["neutral", "friendly", "professional"] | None = None,
) -> dict[str, Any]:
    """Have the language model shorten text to fit a character limit.

    A known platform's limit takes precedence over max_chars; with
    neither, the limit is 280.

    Args:
        text: The text to shorten (max 8000 characters).
        platform: Target platform (twitter/x, instagram, threads, linkedin, ...).
        max_chars: Explicit character limit.
        keep_hashtags: Keep hashtags and links.
        keep_cta: Keep call-to-action phrases.
        tone: Optional tone for the rewrite.

    Returns:
        result/shortened: The shortened text.
        char_count: Its length in code points.
    """
    from textcraft_mcp.ai_service import (
        ShortenError,
        ShortenOptions,
        shorten_text,
        validate_input_text,
    )
    from textcraft_mcp.llm_client import LLMAPIError
    from textcraft_mcp.platforms import char_limit_for

    settings = get_settings()
    error = validate_input_text(text, settings.max_input_chars)
    if error:
        return {"success": False, "error": error}

    limit = char_limit_for(platform, default=max_chars or DEFAULT_SHORTEN_LIMIT)
    if limit <= 0:
        return {"success": False, "error": "max_chars must be a positive integer"}

    try:
        client = _get_llm_client()
    except ValueError as e:
        return {"success": False, "error": str(e)}

    gate = _check_rate_limit(_get_shorten_limiter())
    if gate is not None:
        return gate

    options = ShortenOptions(keep_hashtags=keep_hashtags, keep_cta=keep_cta, tone=tone)
    try:
        result = await shorten_text(client, text, limit, options)
    except ShortenError as exc:
        return {"success": False, "error": str(exc), "details": exc.detail}
    except LLMAPIError as exc:
        logger.error("Shorten request failed: %s", exc)
        return {
            "success": False,
            "error": "AI service temporarily unavailable. Please try again later.",
            "details": exc.detail,
        }

    return {"success": True, "target_length": limit, **result.to_dict()}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Entry point for the TextCraft MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
