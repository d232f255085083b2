"""Extract a structured design specification from the canonical image.

Extraction is best effort. Every failure, and every specification with
nothing enforceable in it, yields ``spec=None`` together with a reason,
and the pipeline continues with image-only consistency.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import ValidationError

from craftstudio.models.assets import AssetRole
from craftstudio.models.design import DesignSpecification
from craftstudio.observability.logging import get_logger
from craftstudio.prompts.loader import PromptLoader, get_loader
from craftstudio.providers.content import find_json_object

if TYPE_CHECKING:
    from craftstudio.models.assets import ImageAsset
    from craftstudio.providers.reasoning import TextReasoner

log = get_logger(__name__)


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of one extraction attempt.

    Attributes:
        spec: Usable specification, or None.
        degraded_reason: Why ``spec`` is None (e.g. ``timeout``,
            ``no_json``, ``empty_specification``); None on success.
    """

    spec: DesignSpecification | None
    degraded_reason: str | None = None

    @property
    def degraded(self) -> bool:
        return self.spec is None


class SpecExtractor:
    """Ask a vision-capable reasoning model to describe the canonical design.

    Args:
        reasoner: Text reasoning backend that accepts images.
        timeout: Seconds allowed for the call.
        temperature: Sampling temperature; kept low for repeatable output.
        loader: Prompt template loader.
    """

    def __init__(
        self,
        reasoner: TextReasoner,
        *,
        timeout: float = 90.0,
        temperature: float = 0.1,
        loader: PromptLoader | None = None,
    ) -> None:
        self._reasoner = reasoner
        self._timeout = timeout
        self._temperature = temperature
        self._loader = loader or get_loader()

    async def extract(self, canonical_image: ImageAsset, product_name: str) -> ExtractionResult:
        """Describe ``canonical_image``. Never raises for remote failures.

        Only the canonical image is sent; templates and references are
        never shown to the extractor.
        """
        system, user = self._loader.load("spec_extraction").render(product_name=product_name)
        image = canonical_image.with_role(AssetRole.CANONICAL)

        try:
            text = await asyncio.wait_for(
                self._reasoner.generate(
                    system, user, images=[image], temperature=self._temperature
                ),
                timeout=self._timeout,
            )
        except TimeoutError:
            return _degraded("timeout")
        except Exception as e:
            return _degraded("remote_error", error=str(e) or type(e).__name__)

        return parse_specification(text)

    async def extract_spec(
        self, canonical_image: ImageAsset, product_name: str
    ) -> DesignSpecification | None:
        """Shortcut returning only the specification (or None)."""
        return (await self.extract(canonical_image, product_name)).spec


def parse_specification(text: str) -> ExtractionResult:
    """Parse and quality-gate a raw extraction response."""
    if not text or not text.strip():
        return _degraded("empty_response")

    raw = find_json_object(text)
    if raw is None:
        return _degraded("no_json")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        return _degraded("malformed_json", error=e.msg)

    if not isinstance(data, dict):
        return _degraded("malformed_json", error="not an object")

    try:
        spec = DesignSpecification.model_validate(data)
    except ValidationError as e:
        return _degraded("invalid_specification", error=str(e))

    if not spec.is_usable:
        return _degraded("empty_specification")

    log.info(
        "spec_extracted",
        colors=len(spec.colors),
        patterns=len(spec.patterns),
        branding=len(spec.branding_elements),
    )
    return ExtractionResult(spec=spec)


def _degraded(reason: str, **context: str) -> ExtractionResult:
    log.warning("spec_extraction_degraded", reason=reason, **context)
    return ExtractionResult(spec=None, degraded_reason=reason)
