"""Tests for LLM message content normalization helpers."""

from __future__ import annotations

from craftstudio.providers.content import extract_text, find_json_object, strip_code_fence


def test_extract_text_string_passthrough() -> None:
    assert extract_text("hello") == "hello"


def test_extract_text_none() -> None:
    assert extract_text(None) == ""


def test_extract_text_content_blocks() -> None:
    content = [
        {"type": "text", "text": "first"},
        {"type": "image_url", "image_url": {"url": "data:..."}},
        {"type": "text", "text": "second"},
    ]
    assert extract_text(content) == "first\nsecond"


def test_extract_text_mixed_list() -> None:
    assert extract_text(["plain", {"type": "text", "text": "block"}]) == "plain\nblock"


def test_extract_text_no_text_blocks() -> None:
    assert extract_text([{"type": "thinking", "thinking": "hmm"}]) == ""


def test_strip_code_fence() -> None:
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fence("```\nplain\n```") == "plain"
    assert strip_code_fence("  no fence  ") == "no fence"


def test_find_json_object_keeps_nesting() -> None:
    text = 'Result: {"a": {"b": 1}} done'
    assert find_json_object(text) == '{"a": {"b": 1}}'


def test_find_json_object_none() -> None:
    assert find_json_object("no braces") is None
    assert find_json_object("} backwards {") is None
