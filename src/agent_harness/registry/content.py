"""Tool result content blocks.

Content is a list of blocks tagged by a ``type`` discriminant. Handlers may
return plain values; ``normalize_content`` turns them into blocks so call
sites never special-case strings against structured data.
"""

import json
from dataclasses import dataclass
from typing import Any, ClassVar, Union


@dataclass(frozen=True)
class TextBlock:
    """Plain text content."""

    text: str
    type: ClassVar[str] = "text"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class JsonBlock:
    """Structured content, rendered to the model as indented JSON text."""

    data: Any
    type: ClassVar[str] = "json"

    @property
    def text(self) -> str:
        return json.dumps(self.data, indent=2, default=str)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


ContentBlock = Union[TextBlock, JsonBlock]

CONTENT_KINDS: dict[str, type] = {
    TextBlock.type: TextBlock,
    JsonBlock.type: JsonBlock,
}


def block_from_dict(data: dict[str, Any]) -> ContentBlock:
    """
    Build a content block from its dict form.

    Raises:
        ValueError: If the block type is not registered in CONTENT_KINDS
    """
    kind = data.get("type", TextBlock.type)
    if kind not in CONTENT_KINDS:
        raise ValueError(f"Unknown content type '{kind}'")
    if kind == JsonBlock.type:
        if "data" in data:
            return JsonBlock(data=data["data"])
        return JsonBlock(data=json.loads(data.get("text", "null")))
    return CONTENT_KINDS[kind](text=str(data.get("text", "")))


def _is_block(value: Any) -> bool:
    return isinstance(value, tuple(CONTENT_KINDS.values()))


def normalize_content(value: Any) -> list[ContentBlock]:
    """
    Convert a handler return value into a list of content blocks.

    Accepted shapes:
    - a content block, or a list of content blocks
    - a str (one text block)
    - an SDK-style ``{"content": [{"type": "text", "text": ...}]}`` dict
    - None (empty content)
    - any other value (one JSON block)
    """
    if value is None:
        return []
    if _is_block(value):
        return [value]
    if isinstance(value, str):
        return [TextBlock(text=value)]
    if isinstance(value, list) and value and all(_is_block(v) for v in value):
        return list(value)
    if isinstance(value, dict) and isinstance(value.get("content"), list):
        blocks = value["content"]
        if all(isinstance(b, dict) and "type" in b for b in blocks):
            return [block_from_dict(b) for b in blocks]
    return [JsonBlock(data=value)]


def content_text(blocks: list[ContentBlock]) -> str:
    """Concatenate the text of all blocks."""
    return "\n".join(block.text for block in blocks)
