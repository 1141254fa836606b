"""Tests for the AI format and shorten flows (language model mocked)."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from textcraft_mcp.ai_service import (
    FORMAT_MAX_TOKENS,
    FORMAT_SYSTEM_PROMPT,
    SHORTEN_MAX_TOKENS,
    SHORTEN_RETRY_MAX_TOKENS,
    ShortenError,
    ShortenOptions,
    ShortenResult,
    build_format_prompt,
    build_shorten_prompt,
    request_format,
    shorten_text,
    validate_input_text,
)
from textcraft_mcp.blocks import HeadingBlock, ParagraphBlock
from textcraft_mcp.llm_client import LLMAPIError
from textcraft_mcp.renderer import render_blocks


def _client(*replies) -> MagicMock:
    """LLM client whose chat() yields *replies* in order (exceptions are raised)."""
    client = MagicMock()
    client.chat = AsyncMock(side_effect=list(replies))
    return client


def _format_reply(blocks, platform="facebook") -> str:
    return json.dumps({"results": [{"platform": platform, "blocks": blocks}]})


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class TestValidateInput:
    def test_ok(self):
        assert validate_input_text("hello") is None

    @pytest.mark.parametrize("value", [None, "", 42])
    def test_required(self, value):
        assert validate_input_text(value) == "Text field is required and must be a string"

    def test_too_long(self):
        assert validate_input_text("a" * 11, max_chars=10) == (
            "Text too long. Maximum 10 characters allowed."
        )

    def test_whitespace_only(self):
        assert validate_input_text("   \n") == "Text cannot be empty"


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------


class TestFormatPrompt:
    def test_lists_platforms_and_text(self):
        prompt = build_format_prompt("my post", ["twitter", "linkedin"])
        assert "twitter, linkedin" in prompt
        assert "INPUT TEXT: <<< my post" in prompt

    def test_system_prompt_describes_highlights(self):
        assert '"highlights"' in FORMAT_SYSTEM_PROMPT


class TestRequestFormat:
    @pytest.mark.asyncio
    async def test_first_attempt_valid(self):
        client = _client(_format_reply([{"type": "heading", "text": "Hi"}]))
        result = await request_format(client, "Hi")

        assert not result.fallback
        assert result.attempts == 1
        assert result.response.results[0].blocks == [HeadingBlock(text="Hi")]

        messages = client.chat.call_args.args[0]
        assert messages[0] == {"role": "system", "content": FORMAT_SYSTEM_PROMPT}
        assert client.chat.call_args.kwargs["json_mode"] is True
        assert client.chat.call_args.kwargs["max_tokens"] == FORMAT_MAX_TOKENS

    @pytest.mark.asyncio
    async def test_retry_after_invalid_reply(self):
        client = _client(
            _format_reply("not-an-array"),
            _format_reply([{"type": "paragraph", "text": "ok"}]),
        )
        result = await request_format(client, "ok", ["twitter"])

        assert not result.fallback
        assert result.attempts == 2
        retry_prompt = client.chat.call_args_list[1].args[0][1]["content"]
        assert retry_prompt.startswith("Your previous response was invalid.")

    @pytest.mark.asyncio
    async def test_retry_after_api_error(self):
        client = _client(
            LLMAPIError(500, "boom"),
            _format_reply([{"type": "paragraph", "text": "ok"}]),
        )
        result = await request_format(client, "ok")
        assert result.attempts == 2
        assert not result.fallback

    @pytest.mark.asyncio
    async def test_falls_back_to_original_text(self):
        raw = "My **raw** post\n#tag"
        client = _client(_format_reply("not-an-array"), "not json at all")
        result = await request_format(client, raw, ["twitter", "linkedin"])

        assert result.fallback
        assert result.attempts == 2
        assert [post.platform for post in result.response.results] == ["twitter", "linkedin"]
        for post in result.response.results:
            assert post.blocks == [ParagraphBlock(text=raw)]

    @pytest.mark.asyncio
    async def test_fallback_renders_as_plain_paragraph(self):
        client = _client(LLMAPIError(0, "down"), LLMAPIError(0, "down"))
        result = await request_format(client, "plain text")
        assert render_blocks(result.response.results[0].blocks) == "plain text"

    @pytest.mark.asyncio
    async def test_default_platform(self):
        client = _client(_format_reply([]))
        await request_format(client, "x")
        prompt = client.chat.call_args.args[0][1]["content"]
        assert "each platform: facebook." in prompt


# ---------------------------------------------------------------------------
# Shorten
# ---------------------------------------------------------------------------


class TestShortenPrompt:
    def test_defaults_keep_hashtags_and_cta(self):
        prompt = build_shorten_prompt("hello world", 100, ShortenOptions())
        assert "<= 100 characters" in prompt
        assert "Keep hashtags and links." in prompt
        assert "Keep call-to-action phrases." in prompt
        assert "Original text (11 characters):\nhello world" in prompt

    def test_options(self):
        prompt = build_shorten_prompt(
            "x", 50, ShortenOptions(keep_hashtags=False, keep_cta=False, tone="friendly")
        )
        assert "Hashtags can be removed if needed." in prompt
        assert "CTA can be shortened if needed." in prompt
        assert "Use friendly tone." in prompt


class TestShortenText:
    @pytest.mark.asyncio
    async def test_first_attempt_fits(self):
        client = _client("short")
        result = await shorten_text(client, "a much longer text", 10)

        assert result.result == "short"
        assert result.char_count == 5
        assert result.original_length == 18
        assert client.chat.await_count == 1
        kwargs = client.chat.call_args.kwargs
        assert kwargs["max_tokens"] == SHORTEN_MAX_TOKENS
        assert kwargs["top_p"] == 0.9

    @pytest.mark.asyncio
    async def test_counts_codepoints(self):
        styled = chr(0x1D400) * 10
        result = await shorten_text(_client(styled), "x" * 40, 10)
        assert result.char_count == 10

    @pytest.mark.asyncio
    async def test_retry_when_too_long(self):
        client = _client("this is still too long", "fits")
        result = await shorten_text(client, "original text here", 10)

        assert result.result == "fits"
        assert client.chat.await_count == 2
        retry = client.chat.call_args_list[1]
        assert retry.kwargs["max_tokens"] == SHORTEN_RETRY_MAX_TOKENS
        assert "Hard limit: 10 characters" in retry.args[0][0]["content"]
        assert "this is still too long" in retry.args[0][0]["content"]

    @pytest.mark.asyncio
    async def test_retry_still_too_long(self):
        client = _client("x" * 30, "y" * 12)
        with pytest.raises(ShortenError) as exc_info:
            await shorten_text(client, "z" * 50, 10)
        assert "couldn't shorten to 10 characters" in str(exc_info.value)
        assert exc_info.value.detail == "Generated 12 characters, needed 10 or fewer"

    @pytest.mark.asyncio
    async def test_retry_api_error(self):
        client = _client("x" * 30, LLMAPIError(503, "unavailable"))
        with pytest.raises(ShortenError, match="manual editing"):
            await shorten_text(client, "z" * 50, 10)

    @pytest.mark.asyncio
    async def test_first_attempt_api_error_propagates(self):
        client = _client(LLMAPIError(429, "slow down"))
        with pytest.raises(LLMAPIError):
            await shorten_text(client, "text", 10)

    def test_to_dict(self):
        data = ShortenResult(result="hi", char_count=2, original_length=9).to_dict()
        assert data == {
            "result": "hi",
            "shortened": "hi",
            "char_count": 2,
            "original_length": 9,
        }
