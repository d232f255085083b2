"""Tests for OpenAIImageProvider."""

from __future__ import annotations

import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

openai = pytest.importorskip("openai")

from craftstudio.providers.image import (  # noqa: E402
    ImageContentPolicyError,
    ImageInvalidInputError,
    ImageNoDataError,
    ImageProviderConnectionError,
    ImageProviderError,
)
from craftstudio.providers.image_openai import OpenAIImageProvider  # noqa: E402
from tests.fixtures.fakes import make_asset  # noqa: E402

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/images/edits")


def _status_error(status: int, message: str) -> Exception:
    response = httpx.Response(status, request=_REQUEST)
    return openai.APIStatusError(message, response=response, body=None)


@pytest.fixture
def provider(monkeypatch: pytest.MonkeyPatch) -> OpenAIImageProvider:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    provider = OpenAIImageProvider()
    provider._client = MagicMock()
    return provider


def _response(b64: str | None = "aW1n") -> SimpleNamespace:
    return SimpleNamespace(data=[SimpleNamespace(b64_json=b64)])


def test_requires_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ImageProviderError, match="OPENAI_API_KEY"):
        OpenAIImageProvider()


def test_rejects_unsupported_format() -> None:
    with pytest.raises(ImageProviderError, match="Unsupported output_format"):
        OpenAIImageProvider(api_key="k", output_format="bmp")


def test_rejects_unsupported_size() -> None:
    with pytest.raises(ImageProviderError, match="Unsupported size"):
        OpenAIImageProvider(api_key="k", size="640x480")


@pytest.mark.asyncio()
async def test_edit_uploads_images_in_order(provider: OpenAIImageProvider) -> None:
    provider._client.images.edit = AsyncMock(return_value=_response())
    canonical, template = make_asset("c"), make_asset("t")

    result = await provider.generate("prompt", [canonical, template])

    files = provider._client.images.edit.await_args.kwargs["image"]
    assert [f[0] for f in files] == ["input_0.png", "input_1.png"]
    assert [f[1] for f in files] == [canonical.data, template.data]
    assert result.image_data == base64.b64decode("aW1n")
    assert result.content_type == "image/png"


@pytest.mark.asyncio()
async def test_generate_without_images(provider: OpenAIImageProvider) -> None:
    provider._client.images.generate = AsyncMock(return_value=_response())

    await provider.generate("prompt")

    assert provider._client.images.generate.await_args.kwargs["prompt"] == "prompt"


@pytest.mark.asyncio()
@pytest.mark.parametrize("response", [SimpleNamespace(data=[]), _response(None)])
async def test_missing_image_data(provider: OpenAIImageProvider, response: object) -> None:
    provider._client.images.generate = AsyncMock(return_value=response)
    with pytest.raises(ImageNoDataError):
        await provider.generate("prompt")


@pytest.mark.asyncio()
@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (_status_error(400, "Rejected by safety system"), ImageContentPolicyError),
        (_status_error(400, "Invalid image file"), ImageInvalidInputError),
        (openai.APIConnectionError(request=_REQUEST), ImageProviderConnectionError),
    ],
)
async def test_error_mapping(
    provider: OpenAIImageProvider, error: Exception, expected: type[Exception]
) -> None:
    provider._client.images.generate = AsyncMock(side_effect=error)
    with pytest.raises(expected):
        await provider.generate("prompt")


@pytest.mark.asyncio()
async def test_server_error_is_generic(provider: OpenAIImageProvider) -> None:
    provider._client.images.generate = AsyncMock(side_effect=_status_error(500, "oops"))
    with pytest.raises(ImageProviderError, match="HTTP 500") as exc_info:
        await provider.generate("prompt")
    assert type(exc_info.value) is ImageProviderError
