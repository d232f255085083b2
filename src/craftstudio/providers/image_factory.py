"""Build image providers from ``provider[/model]`` strings.

Backends are imported only when selected, so ``openai`` stays an optional
dependency.
"""

from __future__ import annotations

from typing import Any

from craftstudio.providers.image import ImageProvider, ImageProviderError

# "google" is accepted so one provider string can serve text and images
_GEMINI_ALIASES = frozenset({"gemini", "google"})


def create_image_provider(provider_spec: str, **kwargs: Any) -> ImageProvider:
    """Create the image provider named by ``provider_spec``.

    Args:
        provider_spec: ``gemini``, ``openai`` or ``placeholder``, optionally
            followed by ``/model``. Without a model the backend default is used.
        **kwargs: Forwarded to the provider constructor.

    Raises:
        ImageProviderError: If the provider is unknown or misconfigured.
    """
    name, _, model = provider_spec.partition("/")
    name = name.strip().lower()
    if model:
        kwargs["model"] = model

    if name == "placeholder":
        from craftstudio.providers.image_placeholder import PlaceholderImageProvider

        kwargs.pop("model", None)
        return PlaceholderImageProvider(**kwargs)

    if name in _GEMINI_ALIASES:
        from craftstudio.providers.image_gemini import GeminiImageProvider

        return GeminiImageProvider(**kwargs)

    if name == "openai":
        from craftstudio.providers.image_openai import OpenAIImageProvider

        return OpenAIImageProvider(**kwargs)

    raise ImageProviderError(name, f"Unknown image provider: {name}")
