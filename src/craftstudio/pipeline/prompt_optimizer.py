"""Turn generation options into an image prompt.

The optimizer asks a reasoning model to write the prompt and falls back to
a deterministic template whenever that call is unavailable or unusable.
Both outcomes are valid prompts; :attr:`OptimizedPrompt.source` records
which path produced the text.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from craftstudio.models.product import ProductType, angle_label, get_product_config
from craftstudio.observability.logging import get_logger
from craftstudio.prompts.loader import PromptLoader, get_loader
from craftstudio.providers.content import strip_code_fence

if TYPE_CHECKING:
    from craftstudio.models.design import DesignParameters, SceneParameters
    from craftstudio.providers.reasoning import TextReasoner

log = get_logger(__name__)


class PromptRole(StrEnum):
    """What the prompt will be used to generate."""

    PRODUCT_DESIGN = "product_design"
    MODEL_SCENE = "model_scene"
    POSTER = "poster"
    VIRTUAL_TRYON = "virtual_tryon"
    ECOMMERCE_SCENE = "ecommerce_scene"


class PromptSource(StrEnum):
    """Which path produced a prompt."""

    OPTIMIZED = "optimized"
    FALLBACK = "fallback"
    CUSTOM = "custom"


@dataclass(frozen=True)
class OptimizedPrompt:
    """Prompt text plus how it was produced.

    Attributes:
        text: Instruction for the image model. Never empty.
        source: Path that produced the text.
        debug_notes: Design rationale from the model, or the reason the
            fallback was used. Not sent to the image model.
    """

    text: str
    source: PromptSource
    debug_notes: str | None = None


@dataclass(frozen=True)
class PromptBrief:
    """Everything one optimization call needs, already rendered to text.

    Attributes:
        role: Selects the reasoning template.
        inputs: Bullet list substituted for the template's ``{inputs}``.
        fallback: Deterministic prompt used when the reasoning call fails.
        context: Other template placeholders (product name, expertise).
    """

    role: PromptRole
    inputs: str
    fallback: str
    context: Mapping[str, str] = field(default_factory=dict)


class PromptParseError(ValueError):
    """Raised internally when a reasoning response is not a usable prompt."""


_TEMPLATE_FOR_ROLE = {
    PromptRole.PRODUCT_DESIGN: "design_optimizer",
    PromptRole.MODEL_SCENE: "scene_optimizer",
    PromptRole.POSTER: "poster_optimizer",
    PromptRole.VIRTUAL_TRYON: "tryon_optimizer",
    PromptRole.ECOMMERCE_SCENE: "ecommerce_optimizer",
}


class PromptOptimizer:
    """Write image prompts with a reasoning model, falling back deterministically.

    Args:
        reasoner: Text reasoning backend.
        timeout: Seconds allowed for one reasoning call.
        loader: Prompt template loader; defaults to the bundled templates.
    """

    def __init__(
        self,
        reasoner: TextReasoner,
        *,
        timeout: float = 60.0,
        loader: PromptLoader | None = None,
    ) -> None:
        self._reasoner = reasoner
        self._timeout = timeout
        self._loader = loader or get_loader()

    async def optimize(
        self,
        params: DesignParameters,
        role: PromptRole = PromptRole.PRODUCT_DESIGN,
        *,
        angle: str | None = None,
        scene: SceneParameters | None = None,
        design_summary: str | None = None,
    ) -> OptimizedPrompt:
        """Produce a design or scene prompt. Never raises for remote failures.

        Args:
            params: Validated design parameters.
            role: Product design or model-wearing scene.
            angle: View angle the design prompt targets, if any.
            scene: Scene options; required for ``MODEL_SCENE``.
            design_summary: Short description of the finished design, used
                by scene prompts.

        Raises:
            ValueError: If ``role`` is ``MODEL_SCENE`` and ``scene`` is None,
                or ``role`` is not built from design parameters.
        """
        if role not in (PromptRole.PRODUCT_DESIGN, PromptRole.MODEL_SCENE):
            raise ValueError(f"{role.value} prompts are optimized from a PromptBrief")
        if role is PromptRole.MODEL_SCENE and scene is None:
            raise ValueError("scene parameters are required for the model_scene role")

        if role is PromptRole.PRODUCT_DESIGN and params.custom_prompt:
            log.info("prompt_custom_used", role=role.value, length=len(params.custom_prompt))
            return OptimizedPrompt(text=params.custom_prompt, source=PromptSource.CUSTOM)

        if role is PromptRole.MODEL_SCENE:
            assert scene is not None
            brief = scene_brief(
                params.product_type,
                scene,
                product_name=params.product_name,
                design_summary=design_summary or _summarize(params),
            )
        else:
            brief = design_brief(params, angle)
        return await self.optimize_brief(brief)

    async def optimize_brief(self, brief: PromptBrief) -> OptimizedPrompt:
        """Produce a prompt for an assembled brief. Never raises for remote failures."""
        template = self._loader.load(_TEMPLATE_FOR_ROLE[brief.role])
        system, user = template.render(inputs=brief.inputs, **brief.context)

        try:
            text = await asyncio.wait_for(
                self._reasoner.generate(system, user),
                timeout=self._timeout,
            )
            prompt, notes = parse_prompt_response(text)
        except Exception as e:
            reason = "timeout" if isinstance(e, TimeoutError) else str(e) or type(e).__name__
            log.warning("prompt_fallback_used", role=brief.role.value, reason=reason)
            return OptimizedPrompt(
                text=brief.fallback,
                source=PromptSource.FALLBACK,
                debug_notes=f"Fallback prompt used: {reason}",
            )

        log.info("prompt_optimized", role=brief.role.value, length=len(prompt))
        return OptimizedPrompt(text=prompt, source=PromptSource.OPTIMIZED, debug_notes=notes)


def parse_prompt_response(text: str) -> tuple[str, str | None]:
    """Extract ``(prompt, debug_notes)`` from a reasoning response.

    Raises:
        PromptParseError: On empty text, invalid JSON or an empty prompt.
    """
    if not text or not text.strip():
        raise PromptParseError("empty response")

    try:
        data = json.loads(strip_code_fence(text))
    except json.JSONDecodeError as e:
        raise PromptParseError(f"invalid JSON: {e.msg}") from e

    if not isinstance(data, dict):
        raise PromptParseError("response is not a JSON object")

    prompt = data.get("prompt")
    if not isinstance(prompt, str) or not prompt.strip():
        raise PromptParseError("response has no prompt")

    notes = data.get("debug_notes")
    return prompt.strip(), notes if isinstance(notes, str) and notes else None


def design_brief(params: DesignParameters, angle: str | None = None) -> PromptBrief:
    """Brief for the product design prompt of one view."""
    config = get_product_config(params.product_type)
    return PromptBrief(
        role=PromptRole.PRODUCT_DESIGN,
        inputs=_design_inputs(params, angle),
        fallback=fallback_design_prompt(params, angle),
        context={
            "designer_expertise": config.designer_expertise,
            "product_name": params.product_name,
            "shape_rules": config.shape_preservation_rules,
        },
    )


def scene_brief(
    product_type: ProductType,
    scene: SceneParameters,
    *,
    product_name: str,
    design_summary: str,
) -> PromptBrief:
    """Brief for a model-wearing scene of a finished design."""
    config = get_product_config(product_type)
    return PromptBrief(
        role=PromptRole.MODEL_SCENE,
        inputs=_scene_inputs(scene, design_summary),
        fallback=fallback_scene_prompt(product_name, scene, design_summary),
        context={
            "designer_expertise": config.designer_expertise,
            "product_name": product_name,
            "model_scene_context": config.model_scene_context,
        },
    )


def _design_inputs(params: DesignParameters, angle: str | None) -> str:
    lines = [
        f"- Product: {params.product_name}",
        f"- Season Theme: {params.theme}",
        f"- Style Direction: {params.style}",
        f"- Color Palette: {params.color}",
        f"- Material: {params.material}",
    ]
    if params.description:
        lines.append(f"- Custom Design Notes: {params.description}")
    if params.style_reference is not None:
        lines.append("- Reference Image: Provided (use for style inspiration)")
    if params.brand_logo is not None:
        lines.append("- Brand Logo: Provided (incorporate into design)")
    if angle:
        lines.append(f"- Target View: {angle_label(params.product_type, angle)}")
    return "\n".join(lines)


def _scene_inputs(scene: SceneParameters, design_summary: str) -> str:
    return "\n".join(
        [
            f"- Design Summary: {design_summary}",
            f"- Nationality/Ethnicity: {scene.nationality}",
            f"- Family Group: {scene.family_combination}",
            f"- Scenario: {scene.scenario}",
            f"- Location: {scene.location}",
            f"- Presentation Style: {scene.presentation_style}",
        ]
    )


def _summarize(params: DesignParameters) -> str:
    product = params.product_name.lower()
    return f"{params.theme} {params.style} {product} in {params.color} {params.material}"


def fallback_design_prompt(params: DesignParameters, angle: str | None = None) -> str:
    """Deterministic product-design prompt built from the parameters alone."""
    lines = [
        f"Create a professional {params.product_name.lower()} design based on the template.",
        f"Season: {params.theme}",
        f"Style: {params.style}",
        f"Colors: {params.color}",
        f"Material: {params.material}",
    ]
    if params.description:
        lines.append(f"Notes: {params.description}")
    if params.style_reference is not None:
        lines.append("Use the style reference image for inspiration only.")
    if params.brand_logo is not None:
        lines.append("Incorporate the provided brand logo into the design.")
    if angle:
        lines.append(f"View: {angle_label(params.product_type, angle)}")
    lines.append(
        "Use professional product photography lighting on a clean, neutral background."
    )
    return "\n".join(lines)


def fallback_scene_prompt(product_name: str, scene: SceneParameters, design_summary: str) -> str:
    """Deterministic model-wearing scene prompt."""
    return "\n".join(
        [
            f"Create a professional model-wearing scene showing the "
            f"{product_name.lower()} design.",
            f"Design: {design_summary}",
            f"Models: {scene.nationality} {scene.family_combination}",
            f"Setting: {scene.location}",
            f"Scenario: {scene.scenario}",
            f"Style: {scene.presentation_style}",
            "Show realistic, professional product photography.",
        ]
    )
