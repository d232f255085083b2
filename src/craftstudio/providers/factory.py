"""Factory for creating text reasoning models.

Uses LangChain's init_chat_model abstraction for unified provider instantiation.
Provider-specific logic (API key resolution, Ollama host) is applied as
pre-processing before the unified call.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

from craftstudio.observability.logging import get_logger
from craftstudio.providers.base import ProviderError

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

log = get_logger(__name__)

# Provider default models - None means model must be explicitly specified
PROVIDER_DEFAULTS: dict[str, str | None] = {
    "ollama": None,
    "openai": "gpt-5-mini",
    "anthropic": "claude-sonnet-4-20250514",
    "google": "gemini-2.5-flash",
}

# Provider -> (init_chat_model provider name, integration package)
_INTEGRATIONS: dict[str, tuple[str, str]] = {
    "ollama": ("ollama", "langchain-ollama"),
    "openai": ("openai", "langchain-openai"),
    "anthropic": ("anthropic", "langchain-anthropic"),
    "google": ("google_genai", "langchain-google-genai"),
}

# Environment variables consulted for each provider's API key, in order
_API_KEY_ENV: dict[str, tuple[str, ...]] = {
    "openai": ("OPENAI_API_KEY",),
    "anthropic": ("ANTHROPIC_API_KEY",),
    "google": ("GOOGLE_API_KEY", "GEMINI_API_KEY"),
}


def get_default_model(provider_name: str) -> str | None:
    """Get default model for a provider.

    Returns None for providers that require explicit model specification.
    """
    return PROVIDER_DEFAULTS.get(_normalize_provider(provider_name))


def parse_provider_spec(spec: str) -> tuple[str, str]:
    """Split ``provider/model`` into its parts, filling in the default model.

    Raises:
        ProviderError: If no model is given and the provider has no default.
    """
    if "/" in spec:
        provider, model = spec.split("/", 1)
        return _normalize_provider(provider), model

    provider = _normalize_provider(spec)
    default_model = get_default_model(provider)
    if default_model is None:
        raise ProviderError(
            provider,
            f"Provider '{provider}' requires explicit model. Use {provider}/<model-name>",
        )
    return provider, default_model


def create_chat_model(
    provider_name: str,
    model: str,
    **kwargs: Any,
) -> BaseChatModel:
    """Create a LangChain BaseChatModel.

    Args:
        provider_name: Provider identifier (ollama, openai, anthropic, google).
        model: Model name/identifier.
        **kwargs: Additional provider-specific options (e.g. ``temperature``).

    Returns:
        Configured BaseChatModel.

    Raises:
        ProviderError: If provider unavailable or misconfigured.
    """
    provider = _normalize_provider(provider_name)

    if provider not in _INTEGRATIONS:
        log.error("provider_unknown", provider=provider)
        raise ProviderError(provider, f"Unknown provider: {provider}")

    kwargs = _preprocess_provider_kwargs(provider, kwargs)
    init_name, package = _INTEGRATIONS[provider]

    try:
        chat_model = _init_chat_model_safe(init_name, model, **kwargs)
    except ImportError as e:
        log.error("provider_import_error", provider=provider, package=package)
        raise ProviderError(
            provider,
            f"{package} not installed. Run: pip install {package}",
        ) from e

    log.info("chat_model_created", provider=provider, model=model)
    return chat_model


def _init_chat_model_safe(provider: str, model: str, **kwargs: Any) -> BaseChatModel:
    """Call init_chat_model; ImportError propagates for missing integrations."""
    from langchain.chat_models import init_chat_model

    result: BaseChatModel = init_chat_model(model=model, model_provider=provider, **kwargs)
    return result


def _preprocess_provider_kwargs(provider: str, kwargs: dict[str, Any]) -> dict[str, Any]:
    """Apply provider-specific pre-processing to kwargs.

    Handles:
    - Ollama: OLLAMA_HOST env var, base_url mapping
    - OpenAI / Anthropic / Google: API key from kwargs or environment

    Raises:
        ProviderError: If required configuration is missing.
    """
    kwargs = dict(kwargs)

    if provider == "ollama":
        host = kwargs.pop("host", None) or os.getenv("OLLAMA_HOST")
        if not host:
            log.error("provider_config_error", provider="ollama", missing="OLLAMA_HOST")
            raise ProviderError(
                "ollama",
                "OLLAMA_HOST not configured. Set OLLAMA_HOST environment variable.",
            )
        kwargs["base_url"] = host
        return kwargs

    env_names = _API_KEY_ENV[provider]
    api_key = kwargs.pop("api_key", None)
    if provider == "google":
        api_key = kwargs.pop("google_api_key", None) or api_key
    api_key = api_key or next((os.getenv(n) for n in env_names if os.getenv(n)), None)
    if not api_key:
        log.error("provider_config_error", provider=provider, missing=env_names[0])
        raise ProviderError(
            provider,
            f"API key required. Set {env_names[0]} environment variable.",
        )
    kwargs["api_key"] = api_key
    return kwargs


def _normalize_provider(provider_name: str) -> str:
    """Normalize provider name, resolving aliases (``gemini`` -> ``google``)."""
    name = provider_name.lower()
    if name == "gemini":
        return "google"
    return name
