"""Tests for tool result content blocks."""

import pytest

from agent_harness.registry import CONTENT_KINDS, JsonBlock, TextBlock, content_text, normalize_content
from agent_harness.registry.content import block_from_dict


def test_string_becomes_text_block():
    """Plain strings are wrapped in one text block."""
    assert normalize_content("hello") == [TextBlock(text="hello")]


def test_none_is_empty_content():
    """None produces no blocks."""
    assert normalize_content(None) == []


def test_structured_value_becomes_json_block():
    """Dicts and other values become JSON blocks rendered as indented text."""
    blocks = normalize_content({"total": 12.5})
    assert blocks == [JsonBlock(data={"total": 12.5})]
    assert blocks[0].text == '{\n  "total": 12.5\n}'


def test_blocks_pass_through():
    """Blocks and lists of blocks are kept as they are."""
    text = TextBlock(text="a")
    data = JsonBlock(data=[1])
    assert normalize_content(text) == [text]
    assert normalize_content([text, data]) == [text, data]


def test_sdk_style_content_dict():
    """{"content": [{"type": "text", ...}]} dicts are unpacked."""
    value = {"content": [{"type": "text", "text": "one"}, {"type": "text", "text": "two"}]}
    blocks = normalize_content(value)
    assert blocks == [TextBlock(text="one"), TextBlock(text="two")]
    assert content_text(blocks) == "one\ntwo"


def test_to_dict_carries_discriminant():
    """Serialised blocks carry their type tag."""
    assert TextBlock(text="x").to_dict() == {"type": "text", "text": "x"}
    assert JsonBlock(data=1).to_dict() == {"type": "json", "text": "1"}


def test_block_from_dict_json_text():
    """JSON blocks can be rebuilt from their text form."""
    assert block_from_dict({"type": "json", "text": '{"a": 1}'}) == JsonBlock(data={"a": 1})


def test_block_from_dict_unknown_kind():
    """Unknown content kinds are rejected."""
    with pytest.raises(ValueError):
        block_from_dict({"type": "image", "data": "..."})
    assert set(CONTENT_KINDS) == {"text", "json"}
