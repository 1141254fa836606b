"""Tests for the MCP tool surface (language model mocked)."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

import textcraft_mcp.server as srv
from textcraft_mcp import __version__
from textcraft_mcp.config import Settings
from textcraft_mcp.formatter import to_bold, to_extra_bold
from textcraft_mcp.llm_client import LLMAPIError
from textcraft_mcp.renderer import SEPARATOR


@pytest.fixture(autouse=True)
def _reset_singletons(monkeypatch):
    """Each test starts with fresh settings, client and limiters."""
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    srv._settings = Settings(_env_file=None)
    srv._llm_client = None
    srv._format_limiter = None
    srv._shorten_limiter = None
    yield
    srv._settings = None
    srv._llm_client = None
    srv._format_limiter = None
    srv._shorten_limiter = None


def _llm(*replies) -> MagicMock:
    client = MagicMock()
    client.chat = AsyncMock(side_effect=list(replies))
    srv._llm_client = client
    return client


async def _call(tool, **kwargs):
    """Invoke a tool whether the decorator returned a Tool or the function."""
    return await getattr(tool, "fn", tool)(**kwargs)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.groq_api_key is None
        assert settings.groq_model == "llama-3.3-70b-versatile"
        assert settings.max_input_chars == 8000
        assert settings.format_rate_limit == 15
        assert settings.shorten_rate_limit == 10

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk-test")
        monkeypatch.setenv("SHORTEN_RATE_LIMIT", "3")
        settings = Settings(_env_file=None)
        assert settings.groq_api_key == "gsk-test"
        assert settings.shorten_rate_limit == 3

    def test_get_settings_is_cached(self):
        srv._settings = None
        assert srv.get_settings() is srv.get_settings()


# ---------------------------------------------------------------------------
# Formatting tools
# ---------------------------------------------------------------------------


class TestHealth:
    @pytest.mark.asyncio
    async def test_ok(self):
        result = await _call(srv.health)
        assert result["service"] == "textcraft-mcp"
        assert result["status"] == "ok"
        assert result["version"] == __version__
        assert result["ai_configured"] is False

    @pytest.mark.asyncio
    async def test_ai_configured(self):
        srv._settings = Settings(_env_file=None, groq_api_key="k")
        assert (await _call(srv.health))["ai_configured"] is True


class TestFormattingTools:
    @pytest.mark.asyncio
    async def test_format_text(self):
        result = await _call(srv.format_text, text="# Big **deal**")
        assert result["success"]
        assert result["formatted_text"] == to_extra_bold("BIG DEAL")
        assert result["char_count"] == 8

    @pytest.mark.asyncio
    async def test_apply_style(self):
        result = await _call(srv.apply_style, text="hi", style="bold-serif")
        assert result == {"success": True, "formatted_text": to_bold("hi")}

    @pytest.mark.asyncio
    async def test_apply_style_unknown(self):
        result = await _call(srv.apply_style, text="hi", style="sparkle")
        assert not result["success"]
        assert "sparkle" in result["error"]

    @pytest.mark.asyncio
    async def test_strip_formatting(self):
        result = await _call(srv.strip_formatting, text=to_bold("Hello"))
        assert result["plain_text"] == "Hello"

    @pytest.mark.asyncio
    async def test_render_blocks(self):
        blocks = [
            {"type": "heading", "text": "Title"},
            {"type": "paragraph", "text": "Body"},
            {"type": "separator"},
        ]
        result = await _call(srv.render_blocks, blocks=blocks)
        assert result["success"]
        assert result["formatted_text"] == to_extra_bold("TITLE") + "\n\nBody\n\n" + SEPARATOR
        assert result["char_count"] == 5 + 2 + 4 + 2 + 21

    @pytest.mark.asyncio
    async def test_render_blocks_invalid(self):
        result = await _call(srv.render_blocks, blocks=[{"type": "bullets", "items": "x"}])
        assert not result["success"]
        assert result["error"].startswith("Invalid blocks")

    @pytest.mark.asyncio
    async def test_character_count(self):
        result = await _call(srv.character_count, text=to_bold("a" * 252), platform="x")
        assert result["platform"] == "twitter"
        assert result["unicode_count"] == 252
        assert result["plain_text_count"] == 504
        assert result["percentage"] == 90.0
        assert result["over_limit"] is False
        assert result["formatted_chars"] == 252
        assert result["color"] == "#F59E0B"

    @pytest.mark.asyncio
    async def test_character_count_over_limit(self):
        result = await _call(srv.character_count, text="a" * 501, platform="threads")
        assert result["over_limit"] is True
        assert result["color"] == "#EF4444"

    @pytest.mark.asyncio
    async def test_character_count_unknown_platform(self):
        result = await _call(srv.character_count, text="a", platform="myspace")
        assert not result["success"]

    @pytest.mark.asyncio
    async def test_check_compatibility(self):
        result = await _call(srv.check_compatibility, text=to_bold("Hello"))
        assert result["success"]
        assert len(result["platforms"]) == 6
        assert result["platforms"][0]["platform"] == "twitter"
        assert result["summary"]["worst_platform"] == "LinkedIn"
        assert result["accessibility"]["status"] == "fair"


# ---------------------------------------------------------------------------
# AI tools
# ---------------------------------------------------------------------------


def _format_reply(blocks, platform="facebook") -> str:
    return json.dumps({"results": [{"platform": platform, "blocks": blocks}]})


class TestAiFormat:
    @pytest.mark.asyncio
    async def test_not_configured(self):
        result = await _call(srv.ai_format, text="hello")
        assert result == {
            "success": False,
            "error": "AI service not configured. Set GROQ_API_KEY.",
        }

    @pytest.mark.asyncio
    async def test_empty_text(self):
        result = await _call(srv.ai_format, text="   ")
        assert result["error"] == "Text cannot be empty"

    @pytest.mark.asyncio
    async def test_too_long(self):
        srv._settings = Settings(_env_file=None, max_input_chars=5)
        result = await _call(srv.ai_format, text="too long")
        assert result["error"] == "Text too long. Maximum 5 characters allowed."

    @pytest.mark.asyncio
    async def test_renders_blocks(self):
        _llm(_format_reply(
            [
                {"type": "heading", "text": "News"},
                {"type": "hashtags", "items": ["ai"]},
            ],
            platform="twitter",
        ))
        result = await _call(srv.ai_format, text="News #ai", platforms=["twitter"])

        assert result["success"]
        assert result["fallback"] is False
        post = result["results"][0]
        assert post["platform"] == "twitter"
        assert post["formatted_text"] == to_extra_bold("NEWS") + "\n\n#ai"
        assert post["char_limit"] == 280
        assert post["blocks"][0]["type"] == "heading"

    @pytest.mark.asyncio
    async def test_fallback_never_fails(self):
        _llm(_format_reply("not-an-array"), LLMAPIError(500, "boom"))
        result = await _call(srv.ai_format, text="raw input", platforms=["linkedin"])

        assert result["success"]
        assert result["fallback"] is True
        assert result["attempts"] == 2
        post = result["results"][0]
        assert post["formatted_text"] == "raw input"
        assert post["char_limit"] == 3000

    @pytest.mark.asyncio
    async def test_rate_limited(self):
        srv._settings = Settings(_env_file=None, format_rate_limit=1)
        _llm(_format_reply([]), _format_reply([]))
        assert (await _call(srv.ai_format, text="one"))["success"]
        result = await _call(srv.ai_format, text="two")
        assert result == {
            "success": False,
            "error": "Rate limit exceeded. Please try again later.",
        }


class TestAiShorten:
    @pytest.mark.asyncio
    async def test_success_with_platform_limit(self):
        client = _llm("short")
        result = await _call(srv.ai_shorten, text="a long text", platform="threads", max_chars=10)

        assert result["success"]
        assert result["target_length"] == 500
        assert result["result"] == result["shortened"] == "short"
        assert result["char_count"] == 5
        assert result["original_length"] == 11
        assert "<= 500 characters" in client.chat.call_args.args[0][0]["content"]

    @pytest.mark.asyncio
    async def test_max_chars_without_platform(self):
        _llm("ok")
        result = await _call(srv.ai_shorten, text="text", max_chars=50)
        assert result["target_length"] == 50

    @pytest.mark.asyncio
    async def test_default_limit(self):
        _llm("ok")
        result = await _call(srv.ai_shorten, text="text")
        assert result["target_length"] == 280

    @pytest.mark.asyncio
    async def test_negative_limit(self):
        result = await _call(srv.ai_shorten, text="text", max_chars=-5)
        assert not result["success"]

    @pytest.mark.asyncio
    async def test_could_not_shorten(self):
        _llm("x" * 30, "y" * 25)
        result = await _call(srv.ai_shorten, text="z" * 40, max_chars=20)
        assert not result["success"]
        assert result["details"] == "Generated 25 characters, needed 20 or fewer"

    @pytest.mark.asyncio
    async def test_upstream_failure(self):
        _llm(LLMAPIError(429, "Rate limited by language model API"))
        result = await _call(srv.ai_shorten, text="text")
        assert result["error"] == "AI service temporarily unavailable. Please try again later."
        assert result["details"] == "Rate limited by language model API"

    @pytest.mark.asyncio
    async def test_rate_limited(self):
        srv._settings = Settings(_env_file=None, shorten_rate_limit=1)
        _llm("ok", "ok")
        assert (await _call(srv.ai_shorten, text="one"))["success"]
        assert not (await _call(srv.ai_shorten, text="two"))["success"]
