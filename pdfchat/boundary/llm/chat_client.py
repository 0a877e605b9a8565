"""
Generative model client.

Creates the configured LangChain chat model and turns retrieved context plus
a user message into an answer, bounded by a timeout.

Dependencies: langchain_core, langchain_ollama, langchain_google_genai, pdfchat.configs
System role: Answer generation adapter for the Query Gateway
"""

import asyncio
import logging

from langchain_core.language_models.chat_models import BaseChatModel

from pdfchat.configs.llm import LLMSettings
from pdfchat.core.exceptions import ConfigError, GenerationError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT_TEMPLATE = "Answer based on this context:\n{context}"


def create_chat_model(settings: LLMSettings) -> BaseChatModel:
    """
    Create the chat model described by ``settings``.

    Raises:
        ConfigError: Unknown provider
    """
    provider = settings.provider.lower()
    if provider == "ollama":
        from langchain_ollama import ChatOllama

        return ChatOllama(
            model=settings.model,
            base_url=settings.base_url,
            temperature=settings.temperature,
        )

    if provider == "google":
        from langchain_google_genai import ChatGoogleGenerativeAI

        return ChatGoogleGenerativeAI(
            model=settings.model,
            temperature=settings.temperature,
        )

    raise ConfigError(
        f"Invalid LLM provider: {provider}. Must be 'ollama' or 'google'.",
        setting="provider",
    )


class AnswerGenerator:
    """Answer a user message from retrieved context with a chat model."""

    def __init__(self, model: BaseChatModel, timeout_seconds: float = 60.0) -> None:
        """
        Initialize generator.

        Args:
            model: LangChain chat model
            timeout_seconds: Time to wait for a completion before giving up
        """
        self._model = model
        self._timeout_seconds = timeout_seconds

    async def generate(self, context: str, message: str) -> str:
        """
        Generate an answer for ``message`` grounded in ``context``.

        Args:
            context: Retrieved passages joined into one string
            message: User message

        Returns:
            str: Model answer text

        Raises:
            GenerationError: When the model fails or exceeds the timeout
        """
        messages = [
            ("system", SYSTEM_PROMPT_TEMPLATE.format(context=context)),
            ("user", message),
        ]
        try:
            response = await asyncio.wait_for(
                self._model.ainvoke(messages),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise GenerationError(
                "Chat model did not respond in time",
                details={"timeout_seconds": self._timeout_seconds},
            ) from e
        except Exception as e:
            raise GenerationError(f"Chat model call failed: {e}") from e

        content = response.content
        if isinstance(content, list):
            # Multi-part content blocks; keep the text parts.
            content = "".join(
                part if isinstance(part, str) else part.get("text", "")
                for part in content
            )
        logger.info("Answer generated", extra={"answer_chars": len(content)})
        return content
