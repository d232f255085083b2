"""Tests for provider factory."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from craftstudio.providers.base import ProviderError
from craftstudio.providers.factory import (
    PROVIDER_DEFAULTS,
    _normalize_provider,
    create_chat_model,
    get_default_model,
    parse_provider_spec,
)

# --- Tests for get_default_model ---


def test_get_default_model_openai() -> None:
    """OpenAI has a default model."""
    assert get_default_model("openai") == "gpt-5-mini"
    assert get_default_model("OpenAI") == "gpt-5-mini"  # Case insensitive


def test_get_default_model_gemini_alias() -> None:
    assert get_default_model("gemini") == "gemini-2.5-flash"


def test_get_default_model_ollama_returns_none() -> None:
    """Ollama requires explicit model - returns None."""
    assert get_default_model("ollama") is None


def test_get_default_model_unknown_provider() -> None:
    assert get_default_model("unknown") is None


def test_provider_defaults_dict_structure() -> None:
    assert set(PROVIDER_DEFAULTS) == {"ollama", "openai", "anthropic", "google"}


# --- Tests for _normalize_provider (alias resolution) ---


def test_normalize_provider_gemini_alias() -> None:
    """'gemini' resolves to 'google'."""
    assert _normalize_provider("gemini") == "google"
    assert _normalize_provider("GEMINI") == "google"


def test_normalize_provider_passthrough() -> None:
    assert _normalize_provider("OPENAI") == "openai"
    assert _normalize_provider("ollama") == "ollama"


# --- Tests for parse_provider_spec ---


def test_parse_provider_spec_with_model() -> None:
    assert parse_provider_spec("ollama/qwen3:4b") == ("ollama", "qwen3:4b")
    assert parse_provider_spec("gemini/gemini-2.5-pro") == ("google", "gemini-2.5-pro")


def test_parse_provider_spec_default_model() -> None:
    assert parse_provider_spec("google") == ("google", "gemini-2.5-flash")


def test_parse_provider_spec_requires_model_for_ollama() -> None:
    with pytest.raises(ProviderError, match="requires explicit model"):
        parse_provider_spec("ollama")


# --- Tests for create_chat_model ---


def test_create_chat_model_unknown_provider() -> None:
    """Factory raises error for unknown provider."""
    with pytest.raises(ProviderError) as exc_info:
        create_chat_model("unknown", "model")

    assert "Unknown provider" in str(exc_info.value)
    assert exc_info.value.provider == "unknown"


def test_create_chat_model_ollama_missing_host() -> None:
    """Factory raises error when OLLAMA_HOST not set."""
    with patch.dict("os.environ", {}, clear=True), pytest.raises(ProviderError) as exc_info:
        create_chat_model("ollama", "qwen3:4b")

    assert "OLLAMA_HOST not configured" in str(exc_info.value)


def test_create_chat_model_ollama_maps_host_to_base_url() -> None:
    mock_chat = MagicMock()

    with (
        patch.dict("os.environ", {"OLLAMA_HOST": "http://test:11434"}),
        patch(
            "craftstudio.providers.factory._init_chat_model_safe", return_value=mock_chat
        ) as mock_init,
    ):
        result = create_chat_model("ollama", "qwen3:4b", temperature=0.7)

    assert result is mock_chat
    mock_init.assert_called_once_with(
        "ollama", "qwen3:4b", base_url="http://test:11434", temperature=0.7
    )


def test_create_chat_model_missing_key() -> None:
    """Factory raises error when the API key is not set."""
    with patch.dict("os.environ", {}, clear=True), pytest.raises(ProviderError) as exc_info:
        create_chat_model("openai", "gpt-5-mini")

    assert "API key required. Set OPENAI_API_KEY" in str(exc_info.value)
    assert exc_info.value.provider == "openai"


def test_create_chat_model_google_uses_gemini_key() -> None:
    with (
        patch.dict("os.environ", {"GEMINI_API_KEY": "g-key"}, clear=True),
        patch("craftstudio.providers.factory._init_chat_model_safe") as mock_init,
    ):
        create_chat_model("gemini", "gemini-2.5-flash")

    mock_init.assert_called_once_with("google_genai", "gemini-2.5-flash", api_key="g-key")


def test_create_chat_model_explicit_key_wins() -> None:
    with (
        patch.dict("os.environ", {"ANTHROPIC_API_KEY": "env"}),
        patch("craftstudio.providers.factory._init_chat_model_safe") as mock_init,
    ):
        create_chat_model("anthropic", "claude", api_key="explicit")

    assert mock_init.call_args.kwargs["api_key"] == "explicit"


def test_create_chat_model_import_error() -> None:
    """Missing integration packages surface as ProviderError with install hint."""
    with (
        patch.dict("os.environ", {"OPENAI_API_KEY": "sk-test"}),
        patch(
            "craftstudio.providers.factory._init_chat_model_safe",
            side_effect=ImportError("no module"),
        ),
        pytest.raises(ProviderError) as exc_info,
    ):
        create_chat_model("openai", "gpt-5-mini")

    assert "langchain-openai not installed" in str(exc_info.value)
