"""Tests for design specification extraction and its quality gate."""

from __future__ import annotations

import json

import pytest

from craftstudio.models import AssetRole
from craftstudio.pipeline.spec_extractor import SpecExtractor, parse_specification
from tests.fixtures.fakes import EMPTY_SPEC, USABLE_SPEC, FakeReasoner, make_asset


@pytest.fixture
def canonical():
    return make_asset("canonical", AssetRole.RESULT)


@pytest.mark.asyncio
async def test_extracts_usable_spec(canonical) -> None:
    reasoner = FakeReasoner(spec_response=json.dumps(USABLE_SPEC))

    result = await SpecExtractor(reasoner).extract(canonical, "Shoes")

    assert not result.degraded
    assert result.degraded_reason is None
    assert result.spec is not None
    assert result.spec.patterns == ["small daisy print across the upper"]


@pytest.mark.asyncio
async def test_sends_only_canonical_image_at_low_temperature(canonical) -> None:
    reasoner = FakeReasoner()

    await SpecExtractor(reasoner, temperature=0.1).extract(canonical, "Shoes")

    call = reasoner.calls[0]
    assert len(call.images) == 1
    assert call.images[0].data == canonical.data
    assert call.images[0].role is AssetRole.CANONICAL
    assert call.temperature == 0.1
    assert "Shoes" in call.system


@pytest.mark.asyncio
async def test_empty_spec_is_none(canonical) -> None:
    """No colors, patterns or branding means no specification at all."""
    reasoner = FakeReasoner(spec_response=json.dumps(EMPTY_SPEC))

    result = await SpecExtractor(reasoner).extract(canonical, "Shoes")

    assert result.spec is None
    assert result.degraded_reason == "empty_specification"


@pytest.mark.asyncio
async def test_remote_error_degrades(canonical) -> None:
    reasoner = FakeReasoner(spec_error=RuntimeError("SAFETY"))

    result = await SpecExtractor(reasoner).extract(canonical, "Shoes")

    assert result.spec is None
    assert result.degraded_reason == "remote_error"


@pytest.mark.asyncio
async def test_timeout_degrades(canonical) -> None:
    reasoner = FakeReasoner(delay=0.5)

    result = await SpecExtractor(reasoner, timeout=0.01).extract(canonical, "Shoes")

    assert result.degraded_reason == "timeout"


@pytest.mark.asyncio
async def test_extract_spec_shortcut(canonical) -> None:
    extractor = SpecExtractor(FakeReasoner(spec_response="nope"))
    assert await extractor.extract_spec(canonical, "Shoes") is None


@pytest.mark.parametrize(
    ("text", "reason"),
    [
        ("", "empty_response"),
        ("I cannot describe this image.", "no_json"),
        ('{"primaryColors": ["red",]}', "malformed_json"),
        ('{"primaryColors": {"a": 1}}', "invalid_specification"),
        (json.dumps(EMPTY_SPEC), "empty_specification"),
    ],
)
def test_parse_specification_degraded(text: str, reason: str) -> None:
    result = parse_specification(text)
    assert result.spec is None
    assert result.degraded_reason == reason


def test_parse_specification_tolerates_prose_and_fences() -> None:
    text = "Sure!\n```json\n" + json.dumps(USABLE_SPEC, indent=2) + "\n```\nHope that helps."
    result = parse_specification(text)
    assert result.spec is not None
    assert result.spec.branding_elements == ["embroidered logo on the tongue"]
