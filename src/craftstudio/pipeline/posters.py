"""Promotional posters built around uploaded product photos."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from craftstudio.models.assets import AssetRole, ImageAsset
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
    from craftstudio.models.marketing import PosterParameters


def order_poster_inputs(
    products: Sequence[ImageAsset],
    *,
    reference: ImageAsset | None = None,
    logo: ImageAsset | None = None,
) -> list[ImageAsset]:
    """Reference first (layout guidance), then every product, then the logo."""
    ordered: list[ImageAsset] = []
    if reference is not None:
        ordered.append(reference.with_role(AssetRole.REFERENCE))
    ordered.extend(p.with_role(AssetRole.PRODUCT) for p in products)
    if logo is not None:
        ordered.append(logo.with_role(AssetRole.LOGO))
    return ordered


def _copy_lines(options: PosterParameters) -> list[str]:
    lines = []
    if options.headline:
        lines.append(f'- Headline: "{options.headline}" ({options.headline_style} style)')
    else:
        lines.append(f"- Headline: Auto-generate a {options.headline_style} headline")
    if options.selling_points:
        lines.append("- Selling Points:")
        lines.extend(f"  {i}. {point}" for i, point in enumerate(options.selling_points, 1))
    if options.shows_price:
        lines.append(f"- Price Style: {options.price_style}")
        if options.original_price:
            lines.append(f"  - Original: {options.original_price}")
        if options.current_price:
            lines.append(f"  - Current: {options.current_price}")
        if options.discount_text:
            lines.append(f"  - Discount: {options.discount_text}")
    if options.brand_tagline:
        lines.append(f'- Brand Tagline: "{options.brand_tagline}"')
    return lines


def poster_inputs(
    options: PosterParameters,
    product_names: Sequence[str],
    product_count: int,
    *,
    has_reference: bool,
    has_logo: bool,
) -> str:
    """Campaign requirements as the bullet list the poster optimizer reads."""
    lines = [f"- Campaign Type: {options.campaign_type}"]
    if has_reference:
        lines.append(f"- Reference Image: Provided (use as {options.reference_level} reference)")
    lines += [
        f"- Visual Style: {options.visual_style}",
        f"- Background Scene: {options.background_scene}",
        f"- Layout: {options.layout}",
        f"- {options.size_line}",
        *_copy_lines(options),
    ]
    if has_logo:
        lines.append(f"- Logo: Provided (position: {options.logo_position})")
    lines.append(f"- Number of Products: {product_count}")
    if product_names:
        lines.append(f"- Product Names: {', '.join(product_names)}")
    return "\n".join(lines)


def fallback_poster_prompt(
    options: PosterParameters,
    product_count: int,
    *,
    has_reference: bool,
    has_logo: bool,
) -> str:
    """Deterministic poster prompt built from the options alone."""
    lines = [
        "Create a professional e-commerce promotional poster.",
        "",
        f"CAMPAIGN TYPE: {options.campaign_type}",
        f"VISUAL STYLE: {options.visual_style}",
        f"- Background: {options.background_scene}",
        f"- Layout: {options.layout}",
        f"- {options.size_line}",
        "",
        "PRODUCT DISPLAY (HIGHEST PRIORITY):",
        "- Use the exact products shown in the uploaded product images.",
        "- Do not create new products or change their shape, colors, textures or logos.",
    ]
    if product_count == 1:
        lines.append("- Display the single product as the hero element and focal point.")
    else:
        lines.append(f"- Display all {product_count} products in the {options.layout} layout.")
    lines += [
        "- Only add marketing elements (text, background, decorations) around the products.",
        "",
        "MARKETING ELEMENTS:",
        *_copy_lines(options),
    ]
    if has_reference:
        lines.append(
            f"Use the reference image as inspiration for {options.reference_level} only."
        )
    if has_logo:
        lines.append(f"Place the provided brand logo at the {options.logo_position} position.")
    lines.append(
        "Make the poster visually striking, with clear typography, color harmony and "
        "visual hierarchy optimized for conversion."
    )
    return "\n".join(lines)


class PosterGenerator(MarketingGenerator):
    """Generate promotional posters that keep the uploaded products unchanged."""

    kind_label = "poster"
    stage = "generating_poster"

    async def generate(
        self,
        products: Sequence[ImageAsset],
        options: PosterParameters,
        *,
        product_names: Sequence[str] = (),
        reference: ImageAsset | None = None,
        logo: ImageAsset | None = None,
    ) -> MarketingImage:
        """Generate one poster.

        Raises:
            ValueError: If no product image is given.
            MarketingGenerationFailed: On an invalid image or synthesis failure.
        """
        _require_products(products)
        return await self._run_one(
            lambda variant, total: self._generate(
                products, options, product_names, reference, logo, variant, total
            ),
            lambda: _check_inputs(products, reference, logo),
        )

    async def generate_variants(
        self,
        products: Sequence[ImageAsset],
        options: PosterParameters,
        *,
        count: int,
        product_names: Sequence[str] = (),
        reference: ImageAsset | None = None,
        logo: ImageAsset | None = None,
    ) -> list[MarketingOutcome]:
        """Generate ``count`` poster variations; each succeeds or fails on its own.

        Raises:
            ValueError: If no product image is given or ``count`` is out of range.
            MarketingGenerationFailed: If an input image is rejected.
        """
        _require_products(products)
        return await self._run_variants(
            lambda variant, total: self._generate(
                products, options, product_names, reference, logo, variant, total
            ),
            lambda: _check_inputs(products, reference, logo),
            count,
        )

    async def _generate(
        self,
        products: Sequence[ImageAsset],
        options: PosterParameters,
        product_names: Sequence[str],
        reference: ImageAsset | None,
        logo: ImageAsset | None,
        variant: int,
        total: int,
    ) -> MarketingImage:
        has_reference, has_logo = reference is not None, logo is not None
        brief = PromptBrief(
            role=PromptRole.POSTER,
            inputs=poster_inputs(
                options,
                product_names,
                len(products),
                has_reference=has_reference,
                has_logo=has_logo,
            ),
            fallback=fallback_poster_prompt(
                options, len(products), has_reference=has_reference, has_logo=has_logo
            ),
        )
        optimized = await self._optimizer.optimize_brief(brief)
        sections = [optimized.text, WATERMARK_BLOCK]
        note = variation_note(variant, total)
        if note:
            sections.append(note)
        prompt = "\n\n".join(sections)

        images = order_poster_inputs(products, reference=reference, logo=logo)
        return await self._synthesize(prompt, images, optimized.source, variant)


def _require_products(products: Sequence[ImageAsset]) -> None:
    if not products:
        raise ValueError("at least one product image is required")


def _check_inputs(
    products: Sequence[ImageAsset],
    reference: ImageAsset | None,
    logo: ImageAsset | None,
) -> None:
    for number, product in enumerate(products, start=1):
        require_image(product, f"Product image {number}")
    if reference is not None:
        require_image(reference, "Reference image")
    if logo is not None:
        require_image(logo, "Logo image")
