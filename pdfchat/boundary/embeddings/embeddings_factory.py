"""
Embedding model factory.

Builds the LangChain Embeddings implementation selected by
RETRIEVAL_EMBEDDING_PROVIDER. Provider packages are imported lazily so only
the selected backend has to be installed.

Dependencies: langchain_core, langchain_huggingface, langchain_ollama,
    langchain_google_genai, pdfchat.configs
System role: Embedding model instantiation and selection
"""

import logging

from langchain_core.embeddings import DeterministicFakeEmbedding, Embeddings

from pdfchat.configs.retrieval import RetrievalSettings
from pdfchat.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("huggingface", "ollama", "google", "fake")


def create_embeddings(settings: RetrievalSettings) -> Embeddings:
    """
    Create the embedding model described by ``settings``.

    Args:
        settings: Retrieval settings naming provider and model

    Returns:
        Embeddings: Configured LangChain embedding model

    Raises:
        ConfigError: Unknown provider
    """
    provider = settings.embedding_provider.lower()
    logger.info(
        f"{__name__}:create_embeddings - provider={provider}, model={settings.embedding_model}"
    )

    if provider == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        return HuggingFaceEmbeddings(model_name=settings.embedding_model)

    if provider == "ollama":
        from langchain_ollama import OllamaEmbeddings

        return OllamaEmbeddings(
            model=settings.embedding_model,
            base_url=settings.embedding_base_url,
        )

    if provider == "google":
        from langchain_google_genai import GoogleGenerativeAIEmbeddings

        return GoogleGenerativeAIEmbeddings(model=settings.embedding_model)

    if provider == "fake":
        # Hash-seeded random vectors; useful for smoke runs without a model.
        return DeterministicFakeEmbedding(size=settings.embedding_dimension)

    raise ConfigError(
        f"Invalid embedding provider: {provider}. Must be one of {', '.join(SUPPORTED_PROVIDERS)}.",
        setting="embedding_provider",
    )
