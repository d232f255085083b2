"""Tests for image providers and the image provider factory."""

from __future__ import annotations

import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from google.genai import errors as genai_errors
from google.genai import types

from craftstudio.models import AssetRole
from craftstudio.providers.image import (
    ImageContentPolicyError,
    ImageInvalidInputError,
    ImageNoDataError,
    ImageProvider,
    ImageProviderConnectionError,
    ImageProviderError,
    ImageResult,
)
from craftstudio.providers.image_factory import create_image_provider
from craftstudio.providers.image_gemini import GeminiImageProvider
from craftstudio.providers.image_placeholder import PlaceholderImageProvider, make_png
from tests.fixtures.fakes import make_asset

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class TestImageResult:
    def test_from_base64(self) -> None:
        result = ImageResult.from_base64(
            base64.b64encode(b"img").decode(), "image/webp", finish_reason="STOP", model="m"
        )
        assert result.image_data == b"img"
        assert result.content_type == "image/webp"
        assert result.finish_reason == "STOP"
        assert result.provider_metadata == {"model": "m"}
        assert result.size_bytes == 3


class TestImageProviderErrors:
    def test_message_prefix(self) -> None:
        assert str(ImageProviderError("gemini", "boom")) == "[gemini] boom"

    def test_policy_error_keeps_finish_reason(self) -> None:
        error = ImageContentPolicyError("gemini", "stopped", finish_reason="SAFETY")
        assert error.finish_reason == "SAFETY"
        assert isinstance(error, ImageProviderError)


# --- Placeholder ---


class TestMakePng:
    def test_produces_valid_png_signature(self) -> None:
        assert make_png(2, 2, 128, 128, 128)[:8] == PNG_SIGNATURE

    def test_different_colors_produce_different_data(self) -> None:
        assert make_png(4, 4, 255, 0, 0) != make_png(4, 4, 0, 0, 255)


class TestPlaceholderImageProvider:
    def test_conforms_to_protocol(self) -> None:
        assert isinstance(PlaceholderImageProvider(), ImageProvider)

    def test_rejects_non_positive_size(self) -> None:
        with pytest.raises(ValueError, match="size must be positive"):
            PlaceholderImageProvider(size=0)

    @pytest.mark.asyncio()
    async def test_generate_returns_png(self) -> None:
        result = await PlaceholderImageProvider(size=64).generate("prompt", [make_asset("t")])

        assert result.image_data[:8] == PNG_SIGNATURE
        assert result.finish_reason == "STOP"
        assert result.provider_metadata["quality"] == "placeholder"
        assert result.provider_metadata["size"] == "64x64"
        assert result.provider_metadata["input_count"] == 1

    @pytest.mark.asyncio()
    async def test_deterministic(self) -> None:
        provider = PlaceholderImageProvider()
        first = await provider.generate("same", [make_asset("t")])
        second = await provider.generate("same", [make_asset("t")])
        assert first.image_data == second.image_data


# --- Gemini ---


def _gemini_response(
    parts: list[object] | None = None,
    finish_reason: object = types.FinishReason.STOP,
    block_reason: object = None,
) -> SimpleNamespace:
    candidate = SimpleNamespace(
        content=SimpleNamespace(parts=parts or []),
        finish_reason=finish_reason,
    )
    return SimpleNamespace(
        candidates=[candidate],
        prompt_feedback=SimpleNamespace(block_reason=block_reason),
    )


def _image_part(data: bytes | str, mime_type: str = "image/png") -> SimpleNamespace:
    return SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type), text=None)


def _text_part(text: str) -> SimpleNamespace:
    return SimpleNamespace(inline_data=None, text=text)


def _gemini(
    response: object = None, error: Exception | None = None
) -> tuple[GeminiImageProvider, AsyncMock]:
    client = MagicMock()
    call = AsyncMock(return_value=response, side_effect=error)
    client.aio.models.generate_content = call
    return GeminiImageProvider(client=client), call


class TestGeminiImageProvider:
    def test_requires_api_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        with pytest.raises(ImageProviderError, match="GOOGLE_API_KEY"):
            GeminiImageProvider()

    def test_reads_gemini_api_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.setenv("GEMINI_API_KEY", "secret")
        created: list[str] = []
        monkeypatch.setattr(
            GeminiImageProvider, "_create_client", staticmethod(lambda key: created.append(key))
        )

        provider = GeminiImageProvider(model="gemini-x")

        assert created == ["secret"]
        assert provider.model == "gemini-x"

    @pytest.mark.asyncio()
    async def test_sends_prompt_then_images_in_order(self) -> None:
        provider, call = _gemini(_gemini_response([_image_part(b"out")]))
        canonical = make_asset("canonical", AssetRole.CANONICAL)
        template = make_asset("template")

        await provider.generate("make it", [canonical, template])

        kwargs = call.await_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash-image"
        parts = kwargs["contents"][0].parts
        assert parts[0].text == "make it"
        assert parts[1].inline_data.data == canonical.data
        assert parts[2].inline_data.data == template.data
        assert kwargs["config"].response_modalities == ["IMAGE", "TEXT"]

    @pytest.mark.asyncio()
    async def test_returns_first_inline_image(self) -> None:
        response = _gemini_response(
            [_text_part("Here is your design"), _image_part(b"jpeg", "image/jpeg")]
        )
        provider, _ = _gemini(response)

        result = await provider.generate("p")

        assert result.image_data == b"jpeg"
        assert result.content_type == "image/jpeg"
        assert result.finish_reason == "STOP"
        assert result.provider_metadata["text"] == "Here is your design"

    @pytest.mark.asyncio()
    async def test_base64_inline_data_is_decoded(self) -> None:
        provider, _ = _gemini(_gemini_response([_image_part(base64.b64encode(b"raw").decode())]))
        result = await provider.generate("p")
        assert result.image_data == b"raw"

    @pytest.mark.asyncio()
    async def test_safety_finish_reason_is_policy_error(self) -> None:
        provider, _ = _gemini(
            _gemini_response([_text_part("I can't")], finish_reason=types.FinishReason.SAFETY)
        )
        with pytest.raises(ImageContentPolicyError) as exc_info:
            await provider.generate("p")
        assert exc_info.value.finish_reason == "SAFETY"

    @pytest.mark.asyncio()
    async def test_blocked_prompt_is_policy_error(self) -> None:
        provider, _ = _gemini(_gemini_response(block_reason="PROHIBITED_CONTENT"))
        with pytest.raises(ImageContentPolicyError, match="Prompt blocked"):
            await provider.generate("p")

    @pytest.mark.asyncio()
    async def test_normal_finish_without_image_is_no_data(self) -> None:
        provider, _ = _gemini(_gemini_response([_text_part("Only words")]))
        with pytest.raises(ImageNoDataError, match="Only words"):
            await provider.generate("p")

    @pytest.mark.asyncio()
    async def test_invalid_argument_is_invalid_input(self) -> None:
        error = genai_errors.ClientError(
            400,
            {"error": {"code": 400, "message": "Image is not valid", "status": "INVALID_ARGUMENT"}},
        )
        provider, _ = _gemini(error=error)
        with pytest.raises(ImageInvalidInputError):
            await provider.generate("p")

    @pytest.mark.asyncio()
    async def test_quota_error_is_provider_error(self) -> None:
        error = genai_errors.ClientError(
            429,
            {"error": {"code": 429, "message": "Quota exceeded", "status": "RESOURCE_EXHAUSTED"}},
        )
        provider, _ = _gemini(error=error)
        with pytest.raises(ImageProviderError, match="HTTP 429") as exc_info:
            await provider.generate("p")
        assert not isinstance(exc_info.value, ImageInvalidInputError)

    @pytest.mark.asyncio()
    async def test_transport_error_is_connection_error(self) -> None:
        provider, _ = _gemini(error=httpx.ConnectError("refused"))
        with pytest.raises(ImageProviderConnectionError):
            await provider.generate("p")


# --- Factory ---


class TestCreateImageProvider:
    def test_placeholder(self) -> None:
        assert isinstance(create_image_provider("placeholder"), PlaceholderImageProvider)

    def test_placeholder_kwargs(self) -> None:
        provider = create_image_provider("placeholder", size=32)
        assert isinstance(provider, PlaceholderImageProvider)

    @pytest.mark.parametrize("spec", ["gemini/gemini-x", "google/gemini-x"])
    def test_gemini_with_model(self, spec: str, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GOOGLE_API_KEY", "k")
        monkeypatch.setattr(GeminiImageProvider, "_create_client", staticmethod(lambda key: None))

        provider = create_image_provider(spec)

        assert isinstance(provider, GeminiImageProvider)
        assert provider.model == "gemini-x"

    def test_unknown_provider(self) -> None:
        with pytest.raises(ImageProviderError, match="Unknown image provider: dalle"):
            create_image_provider("DALLE/3")
