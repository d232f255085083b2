"""Deterministic fakes for the reasoning and image synthesis backends."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence
from dataclasses import dataclass, field

from craftstudio.models import AssetRole, ImageAsset
from craftstudio.providers.image import ImageResult

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

USABLE_SPEC = {
    "primaryColors": ["pastel pink", "cream"],
    "secondaryColors": ["mint green"],
    "patterns": ["small daisy print across the upper"],
    "textures": ["smooth canvas"],
    "materials": ["cotton canvas", "white rubber sole"],
    "brandingElements": ["embroidered logo on the tongue"],
    "decorativeElements": [],
    "structuralFeatures": ["round toe"],
    "overallStyle": "Minimal spring sneaker",
}

EMPTY_SPEC = {
    "primaryColors": [],
    "secondaryColors": [],
    "patterns": [],
    "brandingElements": [],
    "materials": ["canvas"],
    "overallStyle": "plain",
}


def image_bytes(tag: str) -> bytes:
    """Return a fake image payload well above the minimum template size."""
    return PNG_SIGNATURE + tag.encode() + bytes(range(200))


def make_asset(tag: str, role: AssetRole = AssetRole.TEMPLATE) -> ImageAsset:
    return ImageAsset(data=image_bytes(tag), mime_type="image/png", role=role)


@dataclass
class ReasonerCall:
    system: str
    user: str
    images: list[ImageAsset]
    temperature: float | None


class FakeReasoner:
    """Deterministic TextReasoner.

    Calls without images are prompt-optimization calls; calls with images
    are spec-extraction calls. Each side answers with a fixed response or
    raises a fixed error.
    """

    def __init__(
        self,
        prompt_response: str = '{"prompt": "A pastel spring canvas sneaker.", "debug_notes": "ok"}',
        spec_response: str | None = None,
        *,
        prompt_error: Exception | None = None,
        spec_error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.prompt_response = prompt_response
        self.spec_response = json.dumps(USABLE_SPEC) if spec_response is None else spec_response
        self.prompt_error = prompt_error
        self.spec_error = spec_error
        self.delay = delay
        self.calls: list[ReasonerCall] = []

    @property
    def extraction_calls(self) -> list[ReasonerCall]:
        return [c for c in self.calls if c.images]

    @property
    def prompt_calls(self) -> list[ReasonerCall]:
        return [c for c in self.calls if not c.images]

    async def generate(
        self,
        system: str,
        user: str,
        *,
        images: Sequence[ImageAsset] = (),
        temperature: float | None = None,
    ) -> str:
        self.calls.append(ReasonerCall(system, user, list(images), temperature))
        if self.delay:
            await asyncio.sleep(self.delay)
        if images:
            if self.spec_error is not None:
                raise self.spec_error
            return self.spec_response
        if self.prompt_error is not None:
            raise self.prompt_error
        return self.prompt_response


@dataclass
class SynthesisCall:
    prompt: str
    images: list[ImageAsset]


@dataclass
class FakeImageProvider:
    """Records every synthesis call and returns a distinct image per call.

    ``failures`` maps a 1-based call number to the exception that call raises.
    """

    failures: dict[int, Exception] = field(default_factory=dict)
    delay: float = 0.0
    calls: list[SynthesisCall] = field(default_factory=list)

    async def generate(self, prompt: str, images: Sequence[ImageAsset] = ()) -> ImageResult:
        self.calls.append(SynthesisCall(prompt, list(images)))
        number = len(self.calls)
        if self.delay:
            await asyncio.sleep(self.delay)
        if number in self.failures:
            raise self.failures[number]
        return ImageResult(
            image_data=image_bytes(f"result-{number}"),
            content_type="image/png",
            finish_reason="STOP",
        )


