"""Prompt text that forces later angles to reproduce the canonical design.

All functions here are pure string builders.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from craftstudio.models.product import ProductType, angle_label, get_product_config

if TYPE_CHECKING:
    from craftstudio.models.design import DesignParameters, DesignSpecification

SPEC_HEADER = "DESIGN SPECIFICATION"

WATERMARK_GUARD = (
    "Never reproduce watermarks, text overlays, phone numbers, URLs or platform "
    "branding from reference images. Only the product's own branding belongs in the image."
)

_RULE = "=" * 64


def _section(title: str, lines: list[str]) -> list[str]:
    return ["", f"{title}:", *(f"  - {line}" for line in lines)]


def build_consistency_prompt(spec: DesignSpecification, label: str) -> str:
    """Render every populated field of ``spec`` as a mandatory constraint.

    Only call this with a usable specification; without one, use
    :func:`build_visual_reference_prompt`.
    """
    lines = [
        _RULE,
        f"{SPEC_HEADER}: ABSOLUTE DESIGN CONSISTENCY REQUIRED",
        _RULE,
        "",
        f"You are generating the {label} of the SAME product shown in the canonical image.",
        "This is not a new product. The design is fixed and has already been manufactured.",
        "The ONLY permitted change is the camera angle and viewpoint.",
    ]

    if spec.colors:
        lines += _section(
            "COLORS (MUST use exactly these, no others)",
            [f"MUST preserve color {c}" for c in spec.colors],
        )
        main = spec.primary_colors[0] if spec.primary_colors else spec.colors[0]
        lines.append(f"  Main body color: {main}")
        lines.append("  Do not shift saturation, brightness or tone. Do not invent new colors.")

    if spec.patterns:
        lines += _section(
            "PATTERNS", [f"MUST use the identical pattern: {p}" for p in spec.patterns]
        )
    if spec.textures:
        lines += _section("TEXTURES", [f"MUST match texture: {t}" for t in spec.textures])
    if spec.materials:
        lines += _section("MATERIALS", [f"MUST use material: {m}" for m in spec.materials])
    if spec.branding_elements:
        lines += _section(
            "BRANDING", [f"MUST include branding element: {b}" for b in spec.branding_elements]
        )
    if spec.decorative_elements:
        lines += _section(
            "DECORATIVE ELEMENTS",
            [f"MUST preserve decorative element: {d}" for d in spec.decorative_elements],
        )
    if spec.structural_features:
        lines += _section(
            "STRUCTURAL FEATURES",
            [f"MUST preserve structural feature: {s}" for s in spec.structural_features],
        )
    if spec.overall_style:
        lines += ["", f"OVERALL STYLE: {spec.overall_style}"]

    lines += [
        "",
        "FORBIDDEN:",
        "  - Adding, removing or recoloring any pattern, texture, material or decoration",
        "  - Creating variations or alternatives of the design",
        f"  - {WATERMARK_GUARD}",
        "",
        f"Generate the {label} with perfect consistency: same product, new camera position.",
    ]
    return "\n".join(lines)


def build_visual_reference_prompt(
    label: str,
    canonical_label: str,
    product_name: str,
) -> str:
    """Simpler prompt used when no usable specification exists.

    Relies on the canonical image alone and contains no specification
    language.
    """
    product = product_name.lower()
    return "\n".join(
        [
            f"The first image is the finished {product} design shown as the {canonical_label}.",
            f"Generate the {label} of exactly this {product}.",
            "Copy every color, pattern, material, texture, logo and decorative detail "
            "exactly as it appears in the first image.",
            "Use the template image only for the product shape and structure at this angle.",
            "Change nothing except the camera angle.",
            WATERMARK_GUARD,
        ]
    )


def build_canonical_prompt(optimized: str, product: ProductType, label: str) -> str:
    """Append shape-preservation rules and the view line to the canonical prompt."""
    config = get_product_config(product)
    return "\n".join(
        [
            optimized.rstrip(),
            "",
            "CRITICAL SHAPE PRESERVATION RULES:",
            config.shape_preservation_rules,
            "Keep the same dimensions, proportions, contours and structural lines as the template.",
            "",
            f"View angle: {label}.",
            "",
            "Think of this as applying a new surface to the exact template shape. "
            "The underlying 3D form stays identical; only the surface appearance changes.",
        ]
    )


def build_angle_prompt(
    *,
    params: DesignParameters,
    angle: str,
    canonical_angle: str,
    spec: DesignSpecification | None,
) -> str:
    """Compose the prompt for a non-canonical angle.

    With a specification: the consistency prompt, the design parameters as
    secondary context, then a final instruction. Without one: the
    visual-reference prompt.
    """
    label = angle_label(params.product_type, angle)
    product = params.product_name

    if spec is None:
        return build_visual_reference_prompt(
            label, angle_label(params.product_type, canonical_angle), product
        )

    context = [
        "",
        "DESIGN PARAMETERS (reference only):",
        f"  - Product: {product}",
        f"  - Theme: {params.theme}",
        f"  - Style: {params.style}",
        f"  - Base colors: {params.color}",
        f"  - Material: {params.material}",
    ]
    if params.description:
        context.append(f"  - Design notes: {params.description}")

    final = [
        "",
        "FINAL INSTRUCTION:",
        f"Generate the {label} of this {product.lower()} so that it matches the "
        "specification above exactly.",
        "Use the canonical design image as the visual reference.",
        "Use the template image to keep the correct product shape and structure.",
    ]
    return "\n".join([build_consistency_prompt(spec, label), *context, *final])
