"""Text reasoning capability used by the prompt optimizer and spec extractor.

The pipeline depends on the :class:`TextReasoner` protocol only; the
LangChain-backed :class:`ChatModelReasoner` is one implementation and
tests substitute deterministic fakes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from langchain_core.messages import HumanMessage, SystemMessage

from craftstudio.observability.logging import get_logger
from craftstudio.providers.content import extract_text

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

    from craftstudio.models.assets import ImageAsset

log = get_logger(__name__)


@runtime_checkable
class TextReasoner(Protocol):
    """Protocol for text (and vision) reasoning backends."""

    async def generate(
        self,
        system: str,
        user: str,
        *,
        images: Sequence[ImageAsset] = (),
        temperature: float | None = None,
    ) -> str:
        """Run one reasoning call.

        Args:
            system: System instructions.
            user: Structured user input.
            images: Images to attach after the user text, in order.
            temperature: Sampling temperature override for this call.

        Returns:
            Response text. Empty or unusable text is a normal outcome and is
            returned as-is; callers decide how to fall back.
        """
        ...


class ChatModelReasoner:
    """TextReasoner backed by a LangChain chat model.

    Args:
        model: Any LangChain ``BaseChatModel`` (Gemini, OpenAI, Anthropic, Ollama).
        name: Label used in log events.
    """

    def __init__(self, model: BaseChatModel, name: str = "chat") -> None:
        self._model = model
        self.name = name

    async def generate(
        self,
        system: str,
        user: str,
        *,
        images: Sequence[ImageAsset] = (),
        temperature: float | None = None,
    ) -> str:
        content: list[str | dict[str, Any]] = [{"type": "text", "text": user}]
        for image in images:
            content.append({"type": "image_url", "image_url": {"url": image.to_data_url()}})

        messages = [SystemMessage(content=system), HumanMessage(content=content)]

        log.debug(
            "reasoning_call_start",
            reasoner=self.name,
            user_length=len(user),
            image_count=len(images),
            temperature=temperature,
        )
        response = await self._with_temperature(temperature).ainvoke(messages)
        text = extract_text(response.content)
        log.debug("reasoning_call_complete", reasoner=self.name, response_length=len(text))
        return text

    def _with_temperature(self, temperature: float | None) -> BaseChatModel:
        """Return a copy of the model with ``temperature`` set, if it has one."""
        fields = getattr(type(self._model), "model_fields", {})
        if temperature is None or "temperature" not in fields:
            return self._model
        return self._model.model_copy(update={"temperature": temperature})


def create_reasoner(spec: str, **kwargs: Any) -> ChatModelReasoner:
    """Create a :class:`ChatModelReasoner` from a ``provider/model`` string."""
    from craftstudio.providers.factory import create_chat_model, parse_provider_spec

    provider, model = parse_provider_spec(spec)
    chat_model = create_chat_model(provider, model, **kwargs)
    return ChatModelReasoner(chat_model, name=f"{provider}/{model}")
