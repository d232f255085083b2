"""Remote capability integrations: text reasoning (LangChain) and image synthesis."""

from craftstudio.providers.base import ProviderError
from craftstudio.providers.factory import create_chat_model, parse_provider_spec
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
from craftstudio.providers.reasoning import ChatModelReasoner, TextReasoner, create_reasoner

__all__ = [
    "ChatModelReasoner",
    "ImageContentPolicyError",
    "ImageInvalidInputError",
    "ImageNoDataError",
    "ImageProvider",
    "ImageProviderConnectionError",
    "ImageProviderError",
    "ImageResult",
    "ProviderError",
    "TextReasoner",
    "create_chat_model",
    "create_image_provider",
    "create_reasoner",
    "parse_provider_spec",
]
