"""Product catalog: per-product angles, labels and design rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class ProductType(StrEnum):
    """Supported product families."""

    SHOES = "shoes"
    SLIPPERS = "slippers"
    CLOTHES = "clothes"
    BAGS = "bags"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ProductConfig:
    """Product-specific terminology and design guidelines.

    Attributes:
        display_name: Human-readable product family name.
        angles: Default ordered view angles for this product.
        angle_labels: Angle identifier to display label.
        designer_expertise: Expertise area injected into optimizer prompts.
        shape_preservation_rules: What must stay fixed from the template.
        model_scene_context: How the product is worn or used in scenes.
    """

    display_name: str
    angles: tuple[str, ...]
    angle_labels: dict[str, str] = field(default_factory=dict)
    designer_expertise: str = "product & industrial design"
    shape_preservation_rules: str = ""
    model_scene_context: str = ""


_FOOTWEAR_LABELS = {
    "top": "Top View",
    "45degree": "45° View",
    "side": "Side View",
    "bottom": "Bottom View",
}

PRODUCT_CONFIGS: dict[ProductType, ProductConfig] = {
    ProductType.SHOES: ProductConfig(
        display_name="Shoes",
        angles=("top", "45degree", "side", "bottom"),
        angle_labels=_FOOTWEAR_LABELS,
        designer_expertise="footwear & athletic shoe design",
        shape_preservation_rules=(
            "Keep the exact shoe last, sole thickness, upper construction, heel height, "
            "and toe box shape from the template. Only modify surface colors, patterns, "
            "materials, textures, and branding."
        ),
        model_scene_context="Model wearing the shoes on their feet, standing or in action",
    ),
    ProductType.SLIPPERS: ProductConfig(
        display_name="Slippers",
        angles=("top", "45degree", "side", "bottom"),
        angle_labels=_FOOTWEAR_LABELS,
        designer_expertise="casual footwear & slipper design",
        shape_preservation_rules=(
            "Keep the exact slipper silhouette, sole thickness, strap position, and overall "
            "construction from the template. Only modify surface graphics, colors, "
            "materials, patterns, and decorative details."
        ),
        model_scene_context="Model wearing the slippers casually, at home or resort setting",
    ),
    ProductType.CLOTHES: ProductConfig(
        display_name="Clothes",
        angles=("front", "back", "side", "detail"),
        angle_labels={
            "front": "Front View",
            "back": "Back View",
            "side": "Side View",
            "detail": "Detail View",
        },
        designer_expertise="fashion apparel & garment design",
        shape_preservation_rules=(
            "Maintain the exact garment silhouette, cut, seam lines, collar/neckline shape, "
            "sleeve length, and overall fit from the template. Only modify fabric patterns, "
            "colors, textures, prints, embellishments, and branding details."
        ),
        model_scene_context="Model wearing the garment naturally in appropriate setting",
    ),
    ProductType.BAGS: ProductConfig(
        display_name="Bags",
        angles=("front", "side", "top", "detail"),
        angle_labels={
            "front": "Front View",
            "side": "Side View",
            "top": "Top View",
            "detail": "Detail View",
        },
        designer_expertise="leather goods & accessory design",
        shape_preservation_rules=(
            "Preserve the exact bag structure, dimensions, proportions, handle/strap "
            "placement, closure system, and 3D form from the template. Only modify surface "
            "materials, colors, textures, hardware finishes, logos, and decorative accents."
        ),
        model_scene_context="Model holding or carrying the bag in a lifestyle setting",
    ),
    ProductType.CUSTOM: ProductConfig(
        display_name="Custom Product",
        angles=("view1", "view2", "view3", "view4"),
        angle_labels={
            "view1": "View 1",
            "view2": "View 2",
            "view3": "View 3",
            "view4": "View 4",
        },
        designer_expertise="product & industrial design",
        shape_preservation_rules=(
            "Maintain the exact product shape, structure, proportions, and fundamental form "
            "from the template. Only modify surface colors, patterns, materials, textures, "
            "logos, and decorative elements."
        ),
        model_scene_context="Model or user interacting with the product in relevant context",
    ),
}


def get_product_config(product_type: ProductType) -> ProductConfig:
    """Return the catalog entry for a product type."""
    return PRODUCT_CONFIGS[product_type]


def angle_label(product_type: ProductType, angle: str) -> str:
    """Return the display label for an angle, or the angle itself if unknown."""
    return get_product_config(product_type).angle_labels.get(angle, angle)


def product_display_name(product_type: ProductType, custom_name: str | None = None) -> str:
    """Name used in prompts: the custom name for custom products, else the catalog name."""
    if product_type is ProductType.CUSTOM and custom_name:
        return custom_name
    return get_product_config(product_type).display_name
