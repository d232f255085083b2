"""OpenAI image generation provider.

Uses gpt-image-1 through the Images ``edit`` endpoint, which accepts several
input images alongside the prompt. The images are uploaded in the order given.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, NoReturn

from craftstudio.models.assets import extension_for
from craftstudio.observability.logging import get_logger
from craftstudio.providers.image import (
    ImageContentPolicyError,
    ImageInvalidInputError,
    ImageNoDataError,
    ImageProviderConnectionError,
    ImageProviderError,
    ImageResult,
)

if TYPE_CHECKING:
    from openai import AsyncOpenAI

    from craftstudio.models.assets import ImageAsset

log = get_logger(__name__)

# Output format → MIME type mapping
_FORMAT_TO_CONTENT_TYPE: dict[str, str] = {
    "png": "image/png",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
}

_SUPPORTED_SIZES = frozenset({"1024x1024", "1536x1024", "1024x1536", "auto"})


class OpenAIImageProvider:
    """Image generation via OpenAI's Images API.

    Args:
        model: Model name (e.g., ``gpt-image-1``).
        api_key: OpenAI API key. Falls back to ``OPENAI_API_KEY`` env var.
        output_format: Image format (``png``, ``jpeg``, ``webp``).
        size: Output size passed to the API.
    """

    def __init__(
        self,
        model: str = "gpt-image-1",
        api_key: str | None = None,
        output_format: str = "png",
        size: str = "1024x1024",
    ) -> None:
        self._model = model
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")
        self._output_format = output_format
        self._size = size

        if not self._api_key:
            raise ImageProviderError(
                "openai",
                "API key required. Set OPENAI_API_KEY environment variable.",
            )

        if output_format not in _FORMAT_TO_CONTENT_TYPE:
            supported = ", ".join(sorted(_FORMAT_TO_CONTENT_TYPE))
            msg = f"Unsupported output_format '{output_format}'. Supported: {supported}"
            raise ImageProviderError("openai", msg)

        if size not in _SUPPORTED_SIZES:
            supported = ", ".join(sorted(_SUPPORTED_SIZES))
            raise ImageProviderError("openai", f"Unsupported size '{size}'. Supported: {supported}")

        self._content_type = _FORMAT_TO_CONTENT_TYPE[output_format]
        self._client: AsyncOpenAI = self._create_client()

    def _create_client(self) -> AsyncOpenAI:
        """Create the AsyncOpenAI client (deferred import to keep openai optional)."""
        try:
            from openai import AsyncOpenAI as _AsyncOpenAI
        except ImportError as e:
            raise ImageProviderError(
                "openai", "openai package not installed. Run: pip install craftstudio[openai]"
            ) from e
        return _AsyncOpenAI(api_key=self._api_key)

    async def generate(
        self,
        prompt: str,
        images: Sequence[ImageAsset] = (),
    ) -> ImageResult:
        """Generate an image from the prompt and ordered input images.

        With no input images the plain ``images.generate`` endpoint is used.

        Raises:
            ImageInvalidInputError: On HTTP 400 for invalid input.
            ImageContentPolicyError: On content policy rejection.
            ImageProviderConnectionError: On network errors.
            ImageNoDataError: When the response carries no image.
            ImageProviderError: On other API errors.
        """
        log.debug(
            "image_generate_start",
            provider="openai",
            model=self._model,
            size=self._size,
            prompt_length=len(prompt),
            image_count=len(images),
        )

        api_kwargs: dict[str, Any] = {
            "model": self._model,
            "prompt": prompt,
            "n": 1,
            "size": self._size,
            "output_format": self._output_format,
        }

        try:
            if images:
                files = [
                    (f"input_{i}{extension_for(img.mime_type)}", img.data, img.mime_type)
                    for i, img in enumerate(images)
                ]
                response = await self._client.images.edit(image=files, **api_kwargs)
            else:
                response = await self._client.images.generate(**api_kwargs)
        except ImageProviderError:
            raise
        except Exception as e:
            self._handle_error(e)

        if not response.data:
            raise ImageNoDataError("openai", "Empty response from image API")

        b64_data = response.data[0].b64_json
        if not b64_data:
            raise ImageNoDataError("openai", "No image data in response")

        log.info("image_generate_complete", provider="openai", model=self._model, size=self._size)

        return ImageResult.from_base64(
            b64_data,
            content_type=self._content_type,
            model=self._model,
            size=self._size,
        )

    def _handle_error(self, error: Exception) -> NoReturn:
        """Convert OpenAI exceptions to ImageProvider exceptions.

        Uses OpenAI typed exceptions, with string matching on the message
        to separate policy rejections from invalid input.
        """
        from openai import APIConnectionError, APIStatusError

        if isinstance(error, APIConnectionError):
            raise ImageProviderConnectionError("openai", f"Connection error: {error}") from error

        if isinstance(error, APIStatusError):
            status = error.status_code
            text = str(error).lower()
            if status == 400 and ("content_policy" in text or "safety" in text):
                raise ImageContentPolicyError(
                    "openai", f"Content policy rejection: {error}"
                ) from error
            if status == 400:
                raise ImageInvalidInputError("openai", f"Invalid input: {error}") from error
            raise ImageProviderError("openai", f"API error (HTTP {status}): {error}") from error

        raise ImageProviderError("openai", f"Image generation failed: {error}") from error
