"""Gemini image generation provider.

Uses the ``google-genai`` SDK against ``gemini-2.5-flash-image``. The model
takes one user turn made of the text instruction followed by the input
images in the order given, and answers with inline image data.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Any, NoReturn

import httpx

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
    from google import genai

    from craftstudio.models.assets import ImageAsset

log = get_logger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash-image"

# Finish reasons that mean the model ended normally
_NORMAL_FINISH_REASONS = frozenset({"STOP", "FINISH_REASON_UNSPECIFIED", "MAX_TOKENS"})

# Substrings in a 4xx error message that point at the caller's input
_INVALID_INPUT_MARKERS = ("INVALID_ARGUMENT", "not valid", "unsupported")


class GeminiImageProvider:
    """Image generation via Gemini's multimodal ``generate_content`` API.

    Args:
        model: Gemini image model name.
        api_key: Google API key. Falls back to ``GOOGLE_API_KEY`` then
            ``GEMINI_API_KEY``.
        client: Pre-built ``genai.Client``; mainly for tests.
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        client: genai.Client | None = None,
    ) -> None:
        self._model = model
        if client is not None:
            self._client = client
            return

        api_key = api_key or os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise ImageProviderError(
                "gemini",
                "API key required. Set GOOGLE_API_KEY environment variable.",
            )
        self._client = self._create_client(api_key)

    @property
    def model(self) -> str:
        return self._model

    @staticmethod
    def _create_client(api_key: str) -> genai.Client:
        from google import genai as _genai

        return _genai.Client(api_key=api_key)

    async def generate(
        self,
        prompt: str,
        images: Sequence[ImageAsset] = (),
    ) -> ImageResult:
        """Generate one image from the prompt and ordered input images.

        Raises:
            ImageInvalidInputError: The API rejected the prompt or an image.
            ImageContentPolicyError: Generation stopped on a safety finish reason.
            ImageNoDataError: The response finished normally without an image.
            ImageProviderConnectionError: Network failure.
            ImageProviderError: Any other API failure.
        """
        from google.genai import types

        parts = [types.Part.from_text(text=prompt)]
        parts.extend(
            types.Part.from_bytes(data=img.data, mime_type=img.mime_type) for img in images
        )
        contents = [types.Content(role="user", parts=parts)]
        config = types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"])

        log.debug(
            "image_generate_start",
            provider="gemini",
            model=self._model,
            prompt_length=len(prompt),
            image_count=len(images),
        )

        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=contents,
                config=config,
            )
        except Exception as e:
            self._handle_error(e)

        return self._extract_result(response)

    def _extract_result(self, response: Any) -> ImageResult:
        feedback = getattr(response, "prompt_feedback", None)
        block_reason = _enum_name(getattr(feedback, "block_reason", None))
        if block_reason:
            raise ImageContentPolicyError(
                "gemini", f"Prompt blocked: {block_reason}", finish_reason=block_reason
            )

        candidates = getattr(response, "candidates", None) or []
        finish_reason = (
            _enum_name(getattr(candidates[0], "finish_reason", None)) if candidates else None
        )
        texts: list[str] = []

        for part in _iter_parts(candidates):
            inline = getattr(part, "inline_data", None)
            data = getattr(inline, "data", None) if inline is not None else None
            if data:
                mime_type = getattr(inline, "mime_type", None) or "image/png"
                log.info(
                    "image_generate_complete",
                    provider="gemini",
                    model=self._model,
                    size_bytes=len(data),
                    finish_reason=finish_reason,
                )
                if isinstance(data, str):
                    return ImageResult.from_base64(
                        data,
                        mime_type,
                        finish_reason=finish_reason,
                        model=self._model,
                        text="\n".join(texts),
                    )
                return ImageResult(
                    image_data=data,
                    content_type=mime_type,
                    finish_reason=finish_reason,
                    provider_metadata={"model": self._model, "text": "\n".join(texts)},
                )
            text = getattr(part, "text", None)
            if text:
                texts.append(text)

        if finish_reason and finish_reason not in _NORMAL_FINISH_REASONS:
            raise ImageContentPolicyError(
                "gemini",
                f"Generation stopped with finish reason {finish_reason}",
                finish_reason=finish_reason,
            )

        detail = f" Model said: {texts[0][:200]}" if texts else ""
        raise ImageNoDataError("gemini", f"No image data in response.{detail}")

    def _handle_error(self, error: Exception) -> NoReturn:
        """Convert google-genai and transport exceptions to ImageProvider exceptions."""
        from google.genai import errors as genai_errors

        if isinstance(error, httpx.TransportError):
            raise ImageProviderConnectionError("gemini", f"Connection error: {error}") from error

        if isinstance(error, genai_errors.ClientError):
            message = str(error)
            if any(marker.lower() in message.lower() for marker in _INVALID_INPUT_MARKERS):
                raise ImageInvalidInputError("gemini", f"Invalid input: {message}") from error
            raise ImageProviderError(
                "gemini", f"API error (HTTP {error.code}): {message}"
            ) from error

        if isinstance(error, genai_errors.APIError):
            raise ImageProviderError("gemini", f"API error (HTTP {error.code}): {error}") from error

        raise ImageProviderError("gemini", f"Image generation failed: {error}") from error


def _iter_parts(candidates: Sequence[Any]) -> Iterator[Any]:
    for candidate in candidates:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            yield part


def _enum_name(value: Any) -> str | None:
    if value is None:
        return None
    name = getattr(value, "name", None)
    return name if isinstance(name, str) else str(value)
