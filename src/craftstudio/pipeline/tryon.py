"""Virtual try-on: put product photos on a person from an uploaded photo."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from craftstudio.models.assets import AssetRole, ImageAsset
from craftstudio.models.marketing import TryOnGarment, TryOnMode, TryOnStyle
from craftstudio.pipeline.marketing import (
    WATERMARK_BLOCK,
    MarketingGenerator,
    MarketingImage,
    MarketingOutcome,
    require_image,
    variation_note,
)
from craftstudio.pipeline.prompt_optimizer import PromptBrief, PromptRole

if TYPE_CHECKING:
    from craftstudio.models.marketing import TryOnParameters, TryOnProduct

_GARMENT_RULES: dict[TryOnGarment, tuple[str, ...]] = {
    TryOnGarment.TOP: (
        "Replace only the upper body garment (shirt, blouse, jacket).",
        "Keep the bottom (pants, skirt) EXACTLY as is.",
    ),
    TryOnGarment.BOTTOM: (
        "Replace only the lower body garment (pants, skirt, shorts).",
        "Keep the top EXACTLY as is.",
    ),
    TryOnGarment.FULL: ("Replace the entire outfit (top and bottom, or a full dress).",),
    TryOnGarment.ACCESSORY: (
        "Integrate the accessory (bag, hat, jewelry) naturally into the image.",
    ),
}

_STYLE_DIRECTION: dict[TryOnStyle, tuple[str, ...]] = {
    TryOnStyle.NATURAL: (
        "STYLE DIRECTION: Natural & Realistic",
        "- Realistic, everyday photography with natural lighting and casual composition.",
        "- Authentic skin tones and textures.",
    ),
    TryOnStyle.EDITORIAL: (
        "STYLE DIRECTION: Fashion Editorial",
        "- High-fashion editorial photography with dramatic lighting.",
        "- Elevated, stylized presentation of magazine quality.",
    ),
}


def tryon_requirements(options: TryOnParameters, products: Sequence[TryOnProduct]) -> str:
    """Mode and pose rules every try-on prompt must carry."""
    if options.mode is TryOnMode.SINGLE:
        assert options.garment is not None
        lines = [
            "MODE: Single Product Precise Replacement",
            f"- Replace ONLY the {options.garment.value} on the person with the provided product.",
            "- Keep ALL other clothing EXACTLY as in the original photo.",
            "- Keep the person's exact appearance (face, body, skin tone, age).",
            *(f"- {rule}" for rule in _GARMENT_RULES[options.garment]),
        ]
    else:
        lines = [
            "MODE: Multi-Product Combination",
            f"- Dress the person in ALL {len(products)} provided products as one cohesive outfit.",
            *(f"- Product {i}: {p.label}" for i, p in enumerate(products, start=1)),
        ]

    lines.append("")
    if options.preserve_pose:
        lines += [
            "POSE PRESERVATION:",
            "- Keep the EXACT pose, body position and camera angle of the original photo.",
            "- Only the clothing or products change.",
        ]
    else:
        lines += [
            "POSE FLEXIBILITY:",
            "- The pose may change slightly to show the products better; keep it natural.",
        ]

    lines += [
        "",
        "INPUTS PROVIDED:",
        "1. Person photo (reference for body, face and "
        f"{'exact pose' if options.preserve_pose else 'general pose'})",
        *(f"{i}. Product image: {p.label}" for i, p in enumerate(products, start=2)),
    ]
    return "\n".join(lines)


def tryon_inputs(options: TryOnParameters, products: Sequence[TryOnProduct]) -> str:
    """Try-on options as the bullet list the try-on optimizer reads."""
    lines = [f"- Mode: {options.mode.value}"]
    if options.garment is not None and options.mode is TryOnMode.SINGLE:
        lines.append(f"- Garment To Replace: {options.garment.value}")
    lines += [f"- Product {i}: {p.label}" for i, p in enumerate(products, start=1)]
    lines += [
        f"- Preserve Pose: {'yes' if options.preserve_pose else 'no'}",
        f"- Style: {options.style.value}",
        f"- {options.size_line}",
    ]
    if options.description:
        lines.append(f"- Notes: {options.description}")
    return "\n".join(lines)


def fallback_tryon_prompt(options: TryOnParameters) -> str:
    """Deterministic try-on prompt; mode and pose rules are appended separately."""
    lines = [
        "Generate a photorealistic image where the person from the first image is wearing "
        "the provided product(s).",
        "",
        *_STYLE_DIRECTION[options.style],
        "",
        "TECHNICAL SPECIFICATIONS:",
        "- Photo-realistic quality with professional lighting.",
        "- Proper fabric physics, draping, fit and proportions.",
        "- Natural shadows and seamless integration between person and products.",
        f"- {options.size_line}",
    ]
    if options.description:
        lines.append(f"- Notes: {options.description}")
    return "\n".join(lines)


class VirtualTryOnGenerator(MarketingGenerator):
    """Dress the person in an uploaded photo in one or more products."""

    kind_label = "virtual try-on"
    stage = "generating_virtual_tryon"

    async def generate(
        self,
        person: ImageAsset,
        products: Sequence[TryOnProduct],
        options: TryOnParameters,
    ) -> MarketingImage:
        """Generate one try-on image.

        Raises:
            ValueError: If the products do not fit the try-on mode.
            MarketingGenerationFailed: On an invalid image or synthesis failure.
        """
        _check_products(products, options)
        return await self._run_one(
            lambda variant, total: self._generate(person, products, options, variant, total),
            lambda: _check_inputs(person, products),
        )

    async def generate_variants(
        self,
        person: ImageAsset,
        products: Sequence[TryOnProduct],
        options: TryOnParameters,
        *,
        count: int,
    ) -> list[MarketingOutcome]:
        """Generate ``count`` try-on variations; each succeeds or fails on its own.

        Raises:
            ValueError: If the products do not fit the mode or ``count`` is out of range.
            MarketingGenerationFailed: If an input image is rejected.
        """
        _check_products(products, options)
        return await self._run_variants(
            lambda variant, total: self._generate(person, products, options, variant, total),
            lambda: _check_inputs(person, products),
            count,
        )

    async def _generate(
        self,
        person: ImageAsset,
        products: Sequence[TryOnProduct],
        options: TryOnParameters,
        variant: int,
        total: int,
    ) -> MarketingImage:
        optimized = await self._optimizer.optimize_brief(
            PromptBrief(
                role=PromptRole.VIRTUAL_TRYON,
                inputs=tryon_inputs(options, products),
                fallback=fallback_tryon_prompt(options),
            )
        )
        sections = [optimized.text, WATERMARK_BLOCK, tryon_requirements(options, products)]
        note = variation_note(variant, total)
        if note:
            sections.append(note)
        prompt = "\n\n".join(sections)

        images = [person.with_role(AssetRole.PERSON)]
        images += [p.image.with_role(AssetRole.PRODUCT) for p in products]
        return await self._synthesize(prompt, images, optimized.source, variant)


def _check_products(products: Sequence[TryOnProduct], options: TryOnParameters) -> None:
    if not products:
        raise ValueError("at least one product is required")
    if options.mode is TryOnMode.SINGLE and len(products) > 1:
        raise ValueError("single-product try-on takes exactly one product; use multi mode")


def _check_inputs(person: ImageAsset, products: Sequence[TryOnProduct]) -> None:
    require_image(person, "Person photo")
    for number, product in enumerate(products, start=1):
        require_image(product.image, f"Product image {number}")
