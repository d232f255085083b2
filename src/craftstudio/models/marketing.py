"""Option models for marketing images built from finished products.

Posters, virtual try-ons and e-commerce scenes all take product photos
as given and only generate what surrounds them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

if TYPE_CHECKING:
    from craftstudio.models.assets import ImageAsset


def _blank_to_none(value: str | None) -> str | None:
    return value or None


def _size_line(aspect_ratio: str, custom_size: tuple[int, int] | None) -> str:
    if custom_size is not None:
        width, height = custom_size
        return f"Dimensions: exactly {width}x{height} pixels"
    return f"Aspect Ratio: {aspect_ratio}"


class _SizedOptions(BaseModel):
    """Output framing shared by every marketing image."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    aspect_ratio: str = Field(default="1:1", min_length=1)
    custom_size: tuple[int, int] | None = None

    @field_validator("custom_size")
    @classmethod
    def _check_size(cls, value: tuple[int, int] | None) -> tuple[int, int] | None:
        if value is not None and min(value) <= 0:
            raise ValueError("custom size must be positive")
        return value

    @property
    def size_line(self) -> str:
        """``Aspect Ratio: ...`` or the exact pixel dimensions."""
        return _size_line(self.aspect_ratio, self.custom_size)


class PosterParameters(_SizedOptions):
    """Campaign, layout and copy for a promotional poster."""

    campaign_type: str = Field(min_length=1)
    visual_style: str = Field(min_length=1)
    background_scene: str = "Clean studio backdrop"
    layout: str = "Hero product centered"
    aspect_ratio: str = Field(default="3:4", min_length=1)
    headline: str | None = None
    headline_style: str = "bold"
    selling_points: tuple[str, ...] = ()
    price_style: str | None = None
    original_price: str | None = None
    current_price: str | None = None
    discount_text: str | None = None
    logo_position: str = "top-left"
    brand_tagline: str | None = None
    reference_level: str = "layout"

    blank_optional = field_validator(
        "headline",
        "price_style",
        "original_price",
        "current_price",
        "discount_text",
        "brand_tagline",
    )(_blank_to_none)

    @field_validator("selling_points", mode="before")
    @classmethod
    def _clean_points(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple)):
            return tuple(str(v).strip() for v in value if v is not None and str(v).strip())
        return value

    @property
    def shows_price(self) -> bool:
        return self.price_style is not None and self.price_style != "no-price"


class TryOnMode(StrEnum):
    """Replace one garment, or dress the person in every product."""

    SINGLE = "single"
    MULTI = "multi"


class TryOnGarment(StrEnum):
    """Which part of the outfit a single-mode try-on replaces."""

    TOP = "top"
    BOTTOM = "bottom"
    FULL = "full"
    ACCESSORY = "accessory"


class TryOnStyle(StrEnum):
    NATURAL = "natural"
    EDITORIAL = "editorial"


class TryOnParameters(_SizedOptions):
    """How products are put on the person in a virtual try-on."""

    mode: TryOnMode = TryOnMode.SINGLE
    garment: TryOnGarment | None = None
    preserve_pose: bool = True
    style: TryOnStyle = TryOnStyle.NATURAL
    aspect_ratio: str = Field(default="3:4", min_length=1)
    description: str | None = None

    blank_optional = field_validator("description")(_blank_to_none)

    @model_validator(mode="after")
    def _single_needs_garment(self) -> TryOnParameters:
        if self.mode is TryOnMode.SINGLE and self.garment is None:
            raise ValueError("single-product try-on needs a garment (top, bottom, full, accessory)")
        return self


@dataclass(frozen=True)
class TryOnProduct:
    """One product photo to put on the person."""

    image: ImageAsset
    product_type: str = "garment"
    name: str | None = None

    @property
    def label(self) -> str:
        return f"{self.product_type} ({self.name})" if self.name else self.product_type


class EcommerceSceneType(StrEnum):
    """Scene presets with their own staging instructions."""

    HOME = "home"
    OFFICE = "office"
    OUTDOOR = "outdoor"
    CAFE = "cafe"
    STUDIO = "studio"
    WHITE_BACKGROUND = "white-bg"
    CUSTOM = "custom"


class EcommerceSceneParameters(_SizedOptions):
    """Staging for a commercial product photograph."""

    scene_type: EcommerceSceneType = EcommerceSceneType.STUDIO
    custom_scene: str | None = None
    lighting: str = "natural"
    composition: str = "center"
    description: str | None = None
    custom_prompt: str | None = None

    blank_optional = field_validator(
        "custom_scene", "description", "custom_prompt"
    )(_blank_to_none)

    @model_validator(mode="after")
    def _custom_needs_description(self) -> EcommerceSceneParameters:
        if self.scene_type is EcommerceSceneType.CUSTOM and not self.custom_scene:
            raise ValueError("a custom scene type needs custom_scene")
        return self

    @property
    def scene_label(self) -> str:
        if self.custom_scene:
            return f"{self.scene_type.value} ({self.custom_scene})"
        return self.scene_type.value


class SceneAssetKind(StrEnum):
    PRODUCT = "product"
    PROP = "prop"


@dataclass(frozen=True)
class SceneAsset:
    """A product or prop photo placed into an e-commerce scene."""

    image: ImageAsset
    kind: SceneAssetKind = SceneAssetKind.PRODUCT
    name: str | None = None

    @property
    def label(self) -> str:
        return self.name or self.kind.value
