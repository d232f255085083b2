"""Image generation provider protocol and types.

Defines the ImageProvider protocol for multimodal image synthesis backends:
a text prompt plus an ordered list of input images in, one image out.

Implementations:
    - GeminiImageProvider (image_gemini.py): gemini-2.5-flash-image
    - OpenAIImageProvider (image_openai.py): gpt-image-1 edits
    - PlaceholderImageProvider (image_placeholder.py): offline solid-color PNGs
"""

from __future__ import annotations

import base64
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from craftstudio.models.assets import ImageAsset


@dataclass(frozen=True)
class ImageResult:
    """Result of an image generation call.

    Attributes:
        image_data: Raw image bytes.
        content_type: MIME type (e.g., ``image/png``).
        finish_reason: Provider finish reason, when reported (e.g. ``STOP``).
        provider_metadata: Provider-specific metadata (model, text parts, etc.).
    """

    image_data: bytes
    content_type: str = "image/png"
    finish_reason: str | None = None
    provider_metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def size_bytes(self) -> int:
        """Size of image data in bytes."""
        return len(self.image_data)

    @classmethod
    def from_base64(
        cls,
        b64_data: str,
        content_type: str = "image/png",
        finish_reason: str | None = None,
        **metadata: Any,
    ) -> ImageResult:
        """Create from base64-encoded image data."""
        return cls(
            image_data=base64.b64decode(b64_data),
            content_type=content_type,
            finish_reason=finish_reason,
            provider_metadata=metadata,
        )


@runtime_checkable
class ImageProvider(Protocol):
    """Protocol for multimodal image synthesis backends.

    The order of ``images`` is significant: providers must pass them to the
    remote model in exactly the order given.
    """

    async def generate(
        self,
        prompt: str,
        images: Sequence[ImageAsset] = (),
    ) -> ImageResult:
        """Generate one image from a prompt and ordered reference images.

        Args:
            prompt: Text instruction.
            images: Input images, most important first.

        Returns:
            ImageResult with generated image data.

        Raises:
            ImageProviderError: If generation fails.
        """
        ...


class ImageProviderError(Exception):
    """Base exception for image provider errors."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(f"[{provider}] {message}")


class ImageContentPolicyError(ImageProviderError):
    """Raised when generation is stopped by a safety filter or finish reason."""

    def __init__(self, provider: str, message: str, finish_reason: str | None = None) -> None:
        self.finish_reason = finish_reason
        super().__init__(provider, message)


class ImageInvalidInputError(ImageProviderError):
    """Raised when the provider rejects the prompt or input images as invalid."""


class ImageNoDataError(ImageProviderError):
    """Raised when a response completed but carried no image payload."""


class ImageProviderConnectionError(ImageProviderError):
    """Raised when the image provider is unreachable."""
