"""TextCraft-mcp: Unicode-styled text formatting for social media posts."""

__version__ = "0.1.0"
