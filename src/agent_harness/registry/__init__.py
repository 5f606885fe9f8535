"""Tool registry package."""
from .content import (
    CONTENT_KINDS,
    ContentBlock,
    JsonBlock,
    TextBlock,
    content_text,
    normalize_content,
)
from .models import FieldSpec, ToolDefinition, ToolOutcome, tool
from .registry import ToolRegistry
from .schema import InputValidator

__all__ = [
    "ToolRegistry",
    "ToolDefinition",
    "ToolOutcome",
    "FieldSpec",
    "InputValidator",
    "tool",
    "ContentBlock",
    "TextBlock",
    "JsonBlock",
    "CONTENT_KINDS",
    "content_text",
    "normalize_content",
]
