"""Studio configuration loading."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from ruamel.yaml import YAML

CONFIG_FILENAME = "studio.yaml"

DEFAULT_TEXT_PROVIDER = "google/gemini-2.5-flash"
DEFAULT_IMAGE_PROVIDER = "gemini/gemini-2.5-flash-image"

# Hard ceiling on concurrent variant runs against the image service
MAX_VARIANTS = 8


@dataclass
class ProvidersConfig:
    """Provider strings for each remote capability.

    Resolution order for each capability:
    1. Environment variable (e.g., CRAFT_IMAGE_PROVIDER)
    2. Config file value
    3. Built-in default

    Attributes:
        text: Reasoning model used for prompt optimization.
        extraction: Optional reasoning model for spec extraction; falls back to ``text``.
        image: Image synthesis provider.
    """

    text: str = DEFAULT_TEXT_PROVIDER
    extraction: str | None = None
    image: str = DEFAULT_IMAGE_PROVIDER

    def get_text_provider(self) -> str:
        return os.getenv("CRAFT_TEXT_PROVIDER") or self.text

    def get_extraction_provider(self, text_provider: str | None = None) -> str:
        """Get the provider for spec extraction.

        Checks CRAFT_EXTRACTION_PROVIDER, then config, then the text provider
        (``text_provider`` when given, else :meth:`get_text_provider`).
        """
        return (
            os.getenv("CRAFT_EXTRACTION_PROVIDER")
            or self.extraction
            or text_provider
            or self.get_text_provider()
        )

    def get_image_provider(self) -> str:
        return os.getenv("CRAFT_IMAGE_PROVIDER") or self.image

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProvidersConfig:
        return cls(
            text=data.get("text", DEFAULT_TEXT_PROVIDER),
            extraction=data.get("extraction"),
            image=data.get("image", DEFAULT_IMAGE_PROVIDER),
        )


@dataclass
class TimeoutsConfig:
    """Per-call timeouts in seconds for each remote stage."""

    prompt_optimization: float = 60.0
    synthesis: float = 180.0
    spec_extraction: float = 90.0

    def __post_init__(self) -> None:
        for name in ("prompt_optimization", "synthesis", "spec_extraction"):
            if getattr(self, name) <= 0:
                raise ValueError(f"timeouts.{name} must be positive")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimeoutsConfig:
        return cls(
            prompt_optimization=float(data.get("prompt_optimization", 60.0)),
            synthesis=float(data.get("synthesis", 180.0)),
            spec_extraction=float(data.get("spec_extraction", 90.0)),
        )


@dataclass
class GenerationSettings:
    """Knobs for one pipeline run.

    Attributes:
        timeouts: Per-call timeouts.
        max_variant_concurrency: Variant runs allowed in flight at once (1 to 8).
        extraction_temperature: Sampling temperature for spec extraction.
    """

    timeouts: TimeoutsConfig = field(default_factory=TimeoutsConfig)
    max_variant_concurrency: int = 4
    extraction_temperature: float = 0.1

    def __post_init__(self) -> None:
        if not 1 <= self.max_variant_concurrency <= MAX_VARIANTS:
            raise ValueError(
                f"max_variant_concurrency must be between 1 and {MAX_VARIANTS}, "
                f"got {self.max_variant_concurrency}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GenerationSettings:
        return cls(
            timeouts=TimeoutsConfig.from_dict(data.get("timeouts") or {}),
            max_variant_concurrency=int(data.get("max_variant_concurrency", 4)),
            extraction_temperature=float(data.get("extraction_temperature", 0.1)),
        )


@dataclass
class StudioConfig:
    """Top-level configuration read from ``studio.yaml``."""

    providers: ProvidersConfig = field(default_factory=ProvidersConfig)
    generation: GenerationSettings = field(default_factory=GenerationSettings)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StudioConfig:
        """Create config from dictionary.

        Args:
            data: Dictionary with optional ``providers`` and ``generation`` sections.

        Returns:
            StudioConfig instance.
        """
        return cls(
            providers=ProvidersConfig.from_dict(data.get("providers") or {}),
            generation=GenerationSettings.from_dict(data.get("generation") or {}),
        )


class StudioConfigError(Exception):
    """Raised when studio configuration cannot be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load studio config at {path}: {reason}")


def load_studio_config(path: Path | None = None) -> StudioConfig:
    """Load configuration from a ``studio.yaml`` file or directory.

    Args:
        path: Config file, or a directory containing ``studio.yaml``.
            When None, or a directory without the file, defaults are used.

    Returns:
        StudioConfig instance.

    Raises:
        StudioConfigError: If an explicit file is missing or invalid.
    """
    if path is None:
        return StudioConfig()

    if path.is_dir():
        path = path / CONFIG_FILENAME
        if not path.exists():
            return StudioConfig()

    if not path.exists():
        raise StudioConfigError(path, "File not found")

    yaml = YAML(typ="safe")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)

        if data is None:
            return StudioConfig()
        if not isinstance(data, dict):
            raise StudioConfigError(path, "Expected a mapping at top level")

        return StudioConfig.from_dict(data)
    except Exception as e:
        if isinstance(e, StudioConfigError):
            raise
        raise StudioConfigError(path, str(e)) from e
