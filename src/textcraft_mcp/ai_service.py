"""AI-assisted formatting and shortening.

Both flows call the language model through :class:`LLMClient` and treat
its output as untrusted:

- **format**: the model splits text into typed blocks. The reply is
  validated against the block schema; an invalid or failed reply is
  retried once with a stricter prompt, and if that also fails the
  original text comes back as a single paragraph block. Callers never
  see a hard failure.
- **shorten**: the model rewrites text under a character limit. An
  over-long reply is retried once with a stricter prompt; if it is still
  too long a :class:`ShortenError` is raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Sequence

from textcraft_mcp.blocks import (
    DEFAULT_PLATFORM,
    FormatResponse,
    FormatValidationError,
    fallback_response,
    parse_format_response,
)
from textcraft_mcp.counter import codepoint_length
from textcraft_mcp.llm_client import LLMAPIError, LLMClient

logger = logging.getLogger(__name__)

MAX_INPUT_CHARS = 8000
FORMAT_MAX_TOKENS = 1000
SHORTEN_MAX_TOKENS = 150
SHORTEN_RETRY_MAX_TOKENS = 100

Tone = Literal["neutral", "friendly", "professional"]


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


def validate_input_text(text: object, max_chars: int = MAX_INPUT_CHARS) -> str | None:
    """Return an error message for unusable input, or None if it is fine."""
    if not text or not isinstance(text, str):
        return "Text field is required and must be a string"
    if len(text) > max_chars:
        return f"Text too long. Maximum {max_chars} characters allowed."
    if not text.strip():
        return "Text cannot be empty"
    return None


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------

FORMAT_SYSTEM_PROMPT = """\
You are a text formatter, not a writer. Your job is to ONLY organize the \
user's text into structured blocks for styling \
(heading/subheading/paragraph/bullets/numbered/cta/hashtags/separator). \
ABSOLUTE RULES:

Do NOT rewrite, paraphrase, summarize, expand, or shorten the user's message.
Copy the user's original wording as-is.
Allowed edits are limited to removing LLM wrapper junk and fixing whitespace.
Keep links and hashtags EXACTLY unchanged.
Output ONLY valid JSON. No markdown. No extra text.

OUTPUT JSON SHAPE: { "results": [ { "platform": string, "blocks": Array< \
| {"type":"heading","text":string} | {"type":"subheading","text":string} \
| {"type":"paragraph","text":string} | {"type":"bullets","items":string[]} \
| {"type":"numbered","items":string[]} | {"type":"cta","text":string} \
| {"type":"hashtags","items":string[]} | {"type":"separator"}> } ] }

Any block may also carry "highlights": [{"text": string, "style": \
"bold"|"italic"|"underline"}] where text is an exact substring of that \
block's text or items.

Block rules:
bullets/numbered/hashtags must use items (string[]).
heading/subheading/paragraph/cta must use text (string).
Do not invent content. Use only text taken from the input.
Do not add any extra keys."""

_RETRY_PREFIX = (
    "Your previous response was invalid. Return ONLY a single JSON object "
    "with the key results.\n\n"
)


def build_format_prompt(text: str, platforms: Sequence[str]) -> str:
    """User prompt asking for one block list per platform."""
    platform_list = ", ".join(platforms)
    return f"""FORMATTER TASK: Analyze the input text and split it into \
formatting blocks to make it look good with Unicode styles. Do NOT change \
the wording.

Produce one entry in results for each platform: {platform_list}.

What counts as formatting (allowed):
Detect a strong first line as a heading (if present or can be extracted verbatim from the text).
Identify subheadings that already exist in the text (verbatim).
Split long text into short paragraphs (same sentences, just grouped).
Convert existing enumerations into bullets or numbered steps WITHOUT rewriting.
Extract hashtags into a hashtags block (keep each hashtag exactly, just grouped).
Detect CTA lines already present (e.g., 'Comment...', 'DM me...', 'Try...') and put them in a cta block (verbatim).
Mark a few key phrases per block as highlights.

What is NOT allowed:
No rewriting.
No new words.
No summarizing.
No shortening for platform limits.

INPUT TEXT: <<< {text}

Return ONLY the JSON object."""


@dataclass(frozen=True)
class FormatResult:
    response: FormatResponse
    fallback: bool = False
    attempts: int = 1


async def _request_blocks(
    client: LLMClient, prompt: str, *, is_retry: bool
) -> FormatResponse:
    user_message = _RETRY_PREFIX + prompt if is_retry else prompt
    content = await client.chat(
        [
            {"role": "system", "content": FORMAT_SYSTEM_PROMPT},
            {"role": "user", "content": user_message},
        ],
        max_tokens=FORMAT_MAX_TOKENS,
        temperature=0.3,
        json_mode=True,
    )
    return parse_format_response(content)


async def request_format(
    client: LLMClient, text: str, platforms: Sequence[str] | None = None
) -> FormatResult:
    """Ask the model for format blocks, retrying once, then falling back.

    Args:
        client: Language model client.
        text: The user's raw post text.
        platforms: Platforms to format for (defaults to facebook).

    Returns:
        FormatResult with the validated response. ``fallback`` is True
        when both attempts failed and the response is the original text
        as a single paragraph per platform.
    """
    platforms = list(platforms or [DEFAULT_PLATFORM])
    prompt = build_format_prompt(text, platforms)

    try:
        return FormatResult(await _request_blocks(client, prompt, is_retry=False))
    except (LLMAPIError, FormatValidationError) as exc:
        logger.warning("Format attempt failed, retrying with stricter prompt: %s", exc)

    try:
        return FormatResult(
            await _request_blocks(client, prompt, is_retry=True), attempts=2
        )
    except (LLMAPIError, FormatValidationError) as exc:
        logger.error("Format retry failed, returning plain text: %s", exc)

    return FormatResult(fallback_response(text, platforms), fallback=True, attempts=2)


# ---------------------------------------------------------------------------
# Shorten
# ---------------------------------------------------------------------------


class ShortenError(Exception):
    """Raised when the model cannot bring the text under the limit."""

    def __init__(self, message: str, detail: str = ""):
        self.detail = detail
        super().__init__(message)


@dataclass(frozen=True)
class ShortenOptions:
    keep_hashtags: bool = True
    keep_cta: bool = True
    tone: Tone | None = None


@dataclass(frozen=True)
class ShortenResult:
    result: str
    char_count: int
    original_length: int

    def to_dict(self) -> dict:
        return {
            "result": self.result,
            "shortened": self.result,
            "char_count": self.char_count,
            "original_length": self.original_length,
        }


def build_shorten_prompt(text: str, max_chars: int, options: ShortenOptions) -> str:
    hashtags = (
        "Keep hashtags and links."
        if options.keep_hashtags
        else "Hashtags can be removed if needed."
    )
    cta = (
        "Keep call-to-action phrases."
        if options.keep_cta
        else "CTA can be shortened if needed."
    )
    tone = f"Use {options.tone} tone." if options.tone else ""
    return (
        f"Shorten the following text to <= {max_chars} characters. Keep meaning, "
        f"{hashtags} {cta} Remove filler words, don't change language. {tone} "
        "Output only the shortened text, no explanations.\n\n"
        f"Original text ({codepoint_length(text)} characters):\n{text}"
    )


def build_stricter_shorten_prompt(text: str, max_chars: int) -> str:
    return (
        f"Make this text shorter. Hard limit: {max_chars} characters maximum. "
        "Remove unnecessary words, keep core meaning. "
        f"Output only the shortened text:\n\n{text}"
    )


async def shorten_text(
    client: LLMClient,
    text: str,
    max_chars: int,
    options: ShortenOptions | None = None,
) -> ShortenResult:
    """Shorten *text* to at most *max_chars* code points.

    Raises:
        LLMAPIError: If the first request fails.
        ShortenError: If the retry fails or is still too long.
    """
    options = options or ShortenOptions()
    original_length = codepoint_length(text)

    shortened = await client.chat(
        [{"role": "user", "content": build_shorten_prompt(text, max_chars, options)}],
        max_tokens=SHORTEN_MAX_TOKENS,
        top_p=0.9,
    )
    count = codepoint_length(shortened)

    if count > max_chars:
        logger.info(
            "First attempt too long: %d/%d chars, retrying with stricter prompt",
            count, max_chars,
        )
        try:
            retry_text = await client.chat(
                [{"role": "user", "content": build_stricter_shorten_prompt(shortened, max_chars)}],
                max_tokens=SHORTEN_RETRY_MAX_TOKENS,
                top_p=0.9,
            )
        except LLMAPIError as exc:
            raise ShortenError(
                f"AI couldn't shorten to {max_chars} characters. "
                "Please try manual editing.",
                detail=str(exc),
            ) from exc

        retry_count = codepoint_length(retry_text)
        if retry_count > max_chars:
            logger.info("Retry still too long: %d/%d chars", retry_count, max_chars)
            raise ShortenError(
                f"AI couldn't shorten to {max_chars} characters. "
                "Try manual editing or remove some content first.",
                detail=f"Generated {retry_count} characters, needed {max_chars} or fewer",
            )
        shortened = retry_text

    result = ShortenResult(
        result=shortened,
        char_count=codepoint_length(shortened),
        original_length=original_length,
    )
    logger.info(
        "Shortening successful: %d -> %d chars (limit %d)",
        original_length, result.char_count, max_chars,
    )
    return result
