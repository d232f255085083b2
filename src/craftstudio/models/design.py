"""Request, specification and result models for design generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from craftstudio.models.assets import AssetRole, ImageAsset
from craftstudio.models.product import ProductType, product_display_name


class AngleRequest(BaseModel):
    """Ordered, non-empty sequence of distinct view angles.

    The first angle is the canonical angle: it is generated first and
    every later angle is forced to reproduce its design.
    """

    model_config = ConfigDict(frozen=True)

    angles: tuple[str, ...] = Field(min_length=1)

    @field_validator("angles", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            return tuple(str(v).strip() for v in value)
        return value

    @field_validator("angles")
    @classmethod
    def _check_distinct(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if any(not angle for angle in value):
            raise ValueError("angle identifiers must be non-empty")
        duplicates = sorted({a for a in value if value.count(a) > 1})
        if duplicates:
            raise ValueError(f"duplicate angles: {', '.join(duplicates)}")
        return value

    @classmethod
    def of(cls, *angles: str) -> AngleRequest:
        """Shorthand constructor: ``AngleRequest.of("top", "45degree")``."""
        return cls(angles=angles)

    @property
    def canonical(self) -> str:
        """The canonical (first) angle."""
        return self.angles[0]

    @property
    def remaining(self) -> tuple[str, ...]:
        """Angles generated after the canonical one, in request order."""
        return self.angles[1:]


class DesignParameters(BaseModel):
    """Validated design inputs shared by every angle of one request.

    Constructed once at the boundary; the pipeline trusts these values and
    never re-validates them.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    theme: str = Field(min_length=1)
    style: str = Field(min_length=1)
    color: str = Field(min_length=1)
    material: str = Field(min_length=1)
    description: str | None = None
    brand_logo: ImageAsset | None = None
    style_reference: ImageAsset | None = None
    product_type: ProductType = ProductType.CUSTOM
    custom_product_name: str | None = None
    custom_prompt: str | None = None

    @field_validator("description", "custom_product_name", "custom_prompt")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("brand_logo")
    @classmethod
    def _as_logo(cls, value: ImageAsset | None) -> ImageAsset | None:
        return value.with_role(AssetRole.LOGO) if value is not None else None

    @field_validator("style_reference")
    @classmethod
    def _as_reference(cls, value: ImageAsset | None) -> ImageAsset | None:
        return value.with_role(AssetRole.REFERENCE) if value is not None else None

    @property
    def product_name(self) -> str:
        """Display name of the product being designed."""
        return product_display_name(self.product_type, self.custom_product_name)


class DesignSpecification(BaseModel):
    """Structured description of a generated canonical design.

    Accepts both snake_case and the camelCase keys the extraction prompt
    asks the model to return.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    primary_colors: list[str] = Field(default_factory=list)
    secondary_colors: list[str] = Field(default_factory=list)
    patterns: list[str] = Field(default_factory=list)
    textures: list[str] = Field(default_factory=list)
    materials: list[str] = Field(default_factory=list)
    branding_elements: list[str] = Field(default_factory=list)
    decorative_elements: list[str] = Field(default_factory=list)
    structural_features: list[str] = Field(default_factory=list)
    overall_style: str = ""

    @field_validator(
        "primary_colors",
        "secondary_colors",
        "patterns",
        "textures",
        "materials",
        "branding_elements",
        "decorative_elements",
        "structural_features",
        mode="before",
    )
    @classmethod
    def _coerce_list(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"expected a list of strings, got {type(value).__name__}")
        return [str(v).strip() for v in value if v is not None and str(v).strip()]

    @field_validator("overall_style", mode="before")
    @classmethod
    def _coerce_style(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @property
    def colors(self) -> list[str]:
        """Primary then secondary colors."""
        return [*self.primary_colors, *self.secondary_colors]

    @property
    def is_usable(self) -> bool:
        """Whether the spec carries enforceable constraints.

        A spec with no colors, no patterns and no branding must be treated
        as absent: prompting with it would claim authority while enforcing
        nothing.
        """
        return bool(self.colors or self.patterns or self.branding_elements)


class SceneParameters(BaseModel):
    """Inputs for a model-wearing scene built from a finished design."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    nationality: str = Field(min_length=1)
    family_combination: str = Field(min_length=1)
    scenario: str = Field(min_length=1)
    location: str = Field(min_length=1)
    presentation_style: str = Field(min_length=1)
    view_angle: str | None = None


class IncompleteResultError(ValueError):
    """Raised when a result does not cover exactly the requested angles."""

    def __init__(self, missing: list[str], extra: list[str]) -> None:
        self.missing = missing
        self.extra = extra
        parts = []
        if missing:
            parts.append(f"missing angles {', '.join(missing)}")
        if extra:
            parts.append(f"unexpected angles {', '.join(extra)}")
        super().__init__(f"Generation incomplete: {'; '.join(parts)}")


@dataclass
class GenerationResult:
    """Angle to generated image mapping for one request.

    Built append-only as angles complete; insertion order follows the
    request order.

    Attributes:
        canonical_angle: The angle whose image anchors all others.
        images: Angle identifier to generated image (role ``result``).
        prompts: Angle identifier to the prompt text used for it.
        spec: Extracted design specification, or None when consistency
            relied on the canonical image alone.
    """

    canonical_angle: str
    images: dict[str, ImageAsset] = field(default_factory=dict)
    prompts: dict[str, str] = field(default_factory=dict)
    spec: DesignSpecification | None = None

    def add(self, angle: str, image: ImageAsset, prompt: str) -> None:
        """Record a completed angle. Each angle may be recorded once."""
        if angle in self.images:
            raise ValueError(f"Angle '{angle}' already recorded")
        self.images[angle] = image.with_role(AssetRole.RESULT)
        self.prompts[angle] = prompt

    @property
    def canonical_image(self) -> ImageAsset:
        return self.images[self.canonical_angle]

    @property
    def angles(self) -> list[str]:
        return list(self.images)

    def assert_covers(self, request: AngleRequest) -> None:
        """Check that the key set equals the requested angle set exactly.

        Raises:
            IncompleteResultError: On any missing or extra angle.
        """
        missing = [a for a in request.angles if a not in self.images]
        extra = [a for a in self.images if a not in request.angles]
        if missing or extra:
            raise IncompleteResultError(missing, extra)

    def __len__(self) -> int:
        return len(self.images)

    def __getitem__(self, angle: str) -> ImageAsset:
        return self.images[angle]

    def __contains__(self, angle: object) -> bool:
        return angle in self.images
