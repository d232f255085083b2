"""E-commerce scenes: products and props staged as a commercial photograph."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from craftstudio.models.assets import AssetRole, ImageAsset
from craftstudio.models.marketing import EcommerceSceneType, SceneAssetKind
from craftstudio.observability.logging import get_logger
from craftstudio.pipeline.consistency import WATERMARK_GUARD
from craftstudio.pipeline.marketing import (
    MarketingGenerator,
    MarketingImage,
    MarketingOutcome,
    require_image,
    variation_note,
)
from craftstudio.pipeline.prompt_optimizer import PromptBrief, PromptRole, PromptSource

if TYPE_CHECKING:
    from craftstudio.models.marketing import EcommerceSceneParameters, SceneAsset

log = get_logger(__name__)

_SCENE_STAGING: dict[EcommerceSceneType, tuple[str, ...]] = {
    EcommerceSceneType.HOME: (
        "Warm, inviting home interior with realistic furniture and decor.",
        "Lived-in and comfortable: living room, bedroom, kitchen corner.",
    ),
    EcommerceSceneType.OFFICE: (
        "Professional workspace with desk and office supplies in the background.",
        "Modern, clean aesthetic that conveys productivity.",
    ),
    EcommerceSceneType.OUTDOOR: (
        "Natural outdoor setting with trees, sky and natural light.",
        "Fresh, airy atmosphere: park, garden, terrace or street corner.",
    ),
    EcommerceSceneType.CAFE: (
        "Cozy coffee shop with tables, chairs and warm ambient light.",
        "Casual, relaxed mood.",
    ),
    EcommerceSceneType.STUDIO: (
        "Professional photography studio with a clean, minimalist background.",
        "Professional lighting setup focused entirely on the subject.",
    ),
    EcommerceSceneType.WHITE_BACKGROUND: (
        "Pure white seamless backdrop (RGB 255, 255, 255) with no environmental elements.",
        "Soft, even lighting that removes shadows.",
    ),
}

_LIGHTING: dict[str, str] = {
    "natural": "Soft natural daylight with gentle shadows and a warm, authentic color temperature.",
    "warm": "Warm-toned golden hour or indoor light (2700K-3500K), cozy and flattering.",
    "bright": "Bright, even high-key lighting with minimal shadows.",
    "soft": "Soft, diffused commercial lighting with no harsh shadows.",
}

_COMPOSITION: dict[str, str] = {
    "center": "Place the main subject in the center of the frame, symmetrical and balanced.",
    "rule-of-thirds": "Position the subject along the rule-of-thirds grid for visual interest.",
    "diagonal": "Arrange elements along diagonal lines that lead the eye through the scene.",
}


def order_scene_assets(assets: Sequence[SceneAsset]) -> list[SceneAsset]:
    """Products first, then props, each group in upload order."""
    products = [a for a in assets if a.kind is SceneAssetKind.PRODUCT]
    return products + [a for a in assets if a.kind is SceneAssetKind.PROP]


def scene_images(
    assets: Sequence[SceneAsset], model_image: ImageAsset | None = None
) -> list[ImageAsset]:
    """Synthesis inputs: the model, then products, then props."""
    images = [model_image.with_role(AssetRole.PERSON)] if model_image is not None else []
    for asset in order_scene_assets(assets):
        role = AssetRole.PRODUCT if asset.kind is SceneAssetKind.PRODUCT else AssetRole.PROP
        images.append(asset.image.with_role(role))
    return images


def scene_constraints(
    options: EcommerceSceneParameters,
    assets: Sequence[SceneAsset],
    *,
    has_model: bool,
    variant: int = 1,
    total: int = 1,
) -> str:
    """Hard scene rules and the numbered asset list appended to every prompt."""
    lines = [
        "SCENE CONSTRAINTS (DO NOT IGNORE):",
        f"- Scene Type: {options.scene_label}",
        f"- Lighting: {options.lighting}",
        f"- Composition: {options.composition}",
        f"- {options.size_line}",
    ]
    if options.description:
        lines.append(f"- User Notes: {options.description}")
    note = variation_note(variant, total)
    if note:
        lines.append(f"- {note}")

    lines += ["", "ELEMENTS TO COMPOSITE:"]
    number = 1
    if has_model:
        lines.append("1. Model (provided image): main subject of the scene")
        number = 2
    for item in order_scene_assets(assets):
        lines.append(f"{number}. {item.kind.value.title()}: {item.label}")
        number += 1

    lines += [
        "",
        "CRITICAL RULES:",
        "- Use the uploaded assets exactly; do NOT invent new products or props.",
        "- Keep product logos and branding accurate.",
        "- Keep scale, perspective and lighting consistent across every element.",
        f"- {WATERMARK_GUARD}",
        "- Produce a single, polished e-commerce photograph ready for marketing.",
    ]
    return "\n".join(lines)


def ecommerce_inputs(
    options: EcommerceSceneParameters, assets: Sequence[SceneAsset], *, has_model: bool
) -> str:
    """Scene options as the bullet list the e-commerce optimizer reads."""
    products = [a.label for a in assets if a.kind is SceneAssetKind.PRODUCT]
    props = [a.label for a in assets if a.kind is SceneAssetKind.PROP]
    lines = [
        f"- Scene Type: {options.scene_label}",
        f"- Lighting: {options.lighting}",
        f"- Composition: {options.composition}",
        f"- {options.size_line}",
        f"- Model: {'provided' if has_model else 'none (product-only scene)'}",
        f"- Products ({len(products)}): {', '.join(products)}",
    ]
    if props:
        lines.append(f"- Props ({len(props)}): {', '.join(props)}")
    if options.description:
        lines.append(f"- Design Notes: {options.description}")
    return "\n".join(lines)


def fallback_ecommerce_prompt(options: EcommerceSceneParameters, *, has_model: bool) -> str:
    """Deterministic scene prompt; constraints and assets are appended separately."""
    subject = "the model and products" if has_model else "the products"
    if has_model:
        intro = (
            "Create a professional marketing photograph that combines the provided model "
            "with the products and props into one cohesive scene."
        )
    else:
        intro = (
            "Create a professional marketing photograph that showcases the provided products "
            "and props in an appealing, commercial-ready display."
        )
    staging = _SCENE_STAGING.get(
        options.scene_type,
        (f"Create a {options.custom_scene} setting that feels authentic and professional.",),
    )
    lines = [intro, "", f"{options.scene_type.value.upper()} SCENE:"]
    lines += [f"- {line}" for line in staging]
    lines += ["", f"LIGHTING: {options.lighting}"]
    if options.lighting in _LIGHTING:
        lines.append(f"- {_LIGHTING[options.lighting]}")
    lines += ["", f"COMPOSITION: {options.composition}"]
    if options.composition in _COMPOSITION:
        lines.append(f"- {_COMPOSITION[options.composition]}")
    lines.append(f"- Keep {subject} clearly visible and well lit.")
    return "\n".join(lines)


class EcommerceSceneGenerator(MarketingGenerator):
    """Stage products, props and an optional model as a commercial photograph."""

    kind_label = "e-commerce scene"
    stage = "generating_ecommerce_scene"

    async def generate(
        self,
        assets: Sequence[SceneAsset],
        options: EcommerceSceneParameters,
        *,
        model_image: ImageAsset | None = None,
    ) -> MarketingImage:
        """Generate one scene.

        Raises:
            ValueError: If no product asset is given.
            MarketingGenerationFailed: On an invalid image or synthesis failure.
        """
        _require_product(assets)
        return await self._run_one(
            lambda variant, total: self._generate(assets, options, model_image, variant, total),
            lambda: _check_inputs(assets, model_image),
        )

    async def generate_variants(
        self,
        assets: Sequence[SceneAsset],
        options: EcommerceSceneParameters,
        *,
        count: int,
        model_image: ImageAsset | None = None,
    ) -> list[MarketingOutcome]:
        """Generate ``count`` distinct scenes of the same assets.

        Raises:
            ValueError: If no product asset is given or ``count`` is out of range.
            MarketingGenerationFailed: If an input image is rejected.
        """
        _require_product(assets)
        return await self._run_variants(
            lambda variant, total: self._generate(assets, options, model_image, variant, total),
            lambda: _check_inputs(assets, model_image),
            count,
        )

    async def _generate(
        self,
        assets: Sequence[SceneAsset],
        options: EcommerceSceneParameters,
        model_image: ImageAsset | None,
        variant: int,
        total: int,
    ) -> MarketingImage:
        has_model = model_image is not None
        if options.custom_prompt:
            log.info("prompt_custom_used", role=PromptRole.ECOMMERCE_SCENE.value)
            text, source = options.custom_prompt, PromptSource.CUSTOM
        else:
            optimized = await self._optimizer.optimize_brief(
                PromptBrief(
                    role=PromptRole.ECOMMERCE_SCENE,
                    inputs=ecommerce_inputs(options, assets, has_model=has_model),
                    fallback=fallback_ecommerce_prompt(options, has_model=has_model),
                )
            )
            text, source = optimized.text, optimized.source

        constraints = scene_constraints(
            options, assets, has_model=has_model, variant=variant, total=total
        )
        prompt = f"{text}\n\n{constraints}"
        images = scene_images(assets, model_image)
        return await self._synthesize(prompt, images, source, variant)


def _require_product(assets: Sequence[SceneAsset]) -> None:
    if not any(a.kind is SceneAssetKind.PRODUCT for a in assets):
        raise ValueError("at least one product image is required")


def _check_inputs(assets: Sequence[SceneAsset], model_image: ImageAsset | None) -> None:
    if model_image is not None:
        require_image(model_image, "Model image")
    for number, asset in enumerate(assets, start=1):
        require_image(asset.image, f"{asset.kind.value.title()} image {number}")
