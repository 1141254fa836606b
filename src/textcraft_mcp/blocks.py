"""Structured format blocks returned by the AI format service.

A response looks like::

    {"results": [{"platform": "linkedin", "blocks": [
        {"type": "heading", "text": "Big news"},
        {"type": "bullets", "items": ["one", "two"],
         "highlights": [{"text": "one", "style": "italic"}]},
        {"type": "separator"}
    ]}]}

The payload comes from a language model, so it is untrusted. Everything
is validated here before the renderer ever sees it.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Sequence, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

BLOCK_TYPES = (
    "heading",
    "subheading",
    "paragraph",
    "bullets",
    "numbered",
    "cta",
    "hashtags",
    "separator",
)

DEFAULT_PLATFORM = "facebook"


class FormatValidationError(Exception):
    """Raised when an AI format payload does not match the block schema."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        self.errors = errors or []
        super().__init__(message)


class HighlightSpan(BaseModel):
    """Substring of a block to emphasize. Skipped if not found."""

    text: str
    style: Literal["bold", "italic", "underline"] = "bold"


class _Block(BaseModel):
    highlights: list[HighlightSpan] = Field(default_factory=list)


class _TextBlock(_Block):
    text: str


class _ItemsBlock(_Block):
    items: list[str]


class HeadingBlock(_TextBlock):
    type: Literal["heading"] = "heading"


class SubheadingBlock(_TextBlock):
    type: Literal["subheading"] = "subheading"


class ParagraphBlock(_TextBlock):
    type: Literal["paragraph"] = "paragraph"


class CtaBlock(_TextBlock):
    type: Literal["cta"] = "cta"


class BulletsBlock(_ItemsBlock):
    type: Literal["bullets"] = "bullets"


class NumberedBlock(_ItemsBlock):
    type: Literal["numbered"] = "numbered"


class HashtagsBlock(_ItemsBlock):
    type: Literal["hashtags"] = "hashtags"


class SeparatorBlock(_Block):
    type: Literal["separator"] = "separator"


FormatBlock = Annotated[
    Union[
        HeadingBlock,
        SubheadingBlock,
        ParagraphBlock,
        CtaBlock,
        BulletsBlock,
        NumberedBlock,
        HashtagsBlock,
        SeparatorBlock,
    ],
    Field(discriminator="type"),
]


class FormattedPost(BaseModel):
    platform: str
    blocks: list[FormatBlock]


class FormatResponse(BaseModel):
    results: list[FormattedPost] = Field(min_length=1)


_blocks_adapter = TypeAdapter(list[FormatBlock])


def _summarize(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    return f"{exc.error_count()} validation error(s); first at {location}: {first['msg']}"


def parse_format_response(payload: str | bytes | dict[str, Any]) -> FormatResponse:
    """Validate a raw AI response into a :class:`FormatResponse`.

    Args:
        payload: JSON text as returned by the model, or an already-decoded dict.

    Raises:
        FormatValidationError: On invalid JSON or any schema violation
            (non-array blocks, unknown type, missing text/items,
            non-string items, bad highlights).
    """
    try:
        if isinstance(payload, (str, bytes)):
            return FormatResponse.model_validate_json(payload)
        return FormatResponse.model_validate(payload)
    except ValidationError as exc:
        raise FormatValidationError(
            f"Invalid format response: {_summarize(exc)}",
            exc.errors(include_url=False),
        ) from exc


def parse_blocks(blocks: Any) -> list[FormatBlock]:
    """Validate a bare list of block dicts."""
    try:
        return _blocks_adapter.validate_python(blocks)
    except ValidationError as exc:
        raise FormatValidationError(
            f"Invalid blocks: {_summarize(exc)}",
            exc.errors(include_url=False),
        ) from exc


def fallback_response(text: str, platforms: Sequence[str]) -> FormatResponse:
    """One plain paragraph per platform, carrying the original text verbatim."""
    return FormatResponse(
        results=[
            FormattedPost(platform=platform, blocks=[ParagraphBlock(text=text)])
            for platform in (platforms or [DEFAULT_PLATFORM])
        ]
    )


def dump_blocks(blocks: Sequence[BaseModel]) -> list[dict[str, Any]]:
    """Serialize validated blocks back to plain JSON-ready dicts."""
    return [block.model_dump() for block in blocks]
