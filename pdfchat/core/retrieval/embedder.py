"""
Embedding adapter over a LangChain Embeddings model.

Batches texts, checks that every returned vector has the process-wide
dimension and converts any model failure into EmbeddingError. No caching.

Dependencies: langchain_core.embeddings, pdfchat.core.exceptions
System role: Embedding stage of ingestion and query flows
"""

import logging
from collections.abc import Sequence

from langchain_core.embeddings import Embeddings

from pdfchat.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)


class EmbeddingAdapter:
    """Pass-through wrapper that batches calls and enforces a fixed dimension."""

    def __init__(self, embeddings: Embeddings, batch_size: int = 64) -> None:
        """
        Initialize adapter around an embedding model.

        Args:
            embeddings: Any LangChain Embeddings implementation
            batch_size: Maximum texts per model call
        """
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._embeddings = embeddings
        self._batch_size = batch_size
        self._dimension: int | None = None

    @property
    def dimension(self) -> int | None:
        """Vector size observed on the first successful call, if any."""
        return self._dimension

    def embed(self, text: str) -> list[float]:
        """
        Embed a single query text.

        Raises:
            EmbeddingError: When the model call fails or returns a bad vector
        """
        try:
            vector = self._embeddings.embed_query(text)
        except Exception as e:
            raise EmbeddingError(f"Failed to embed query: {e}") from e
        return self._check(vector)

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """
        Embed texts in order, in batches of at most ``batch_size``.

        Either every text gets a vector or EmbeddingError is raised.

        Args:
            texts: Texts to embed

        Returns:
            list[list[float]]: One vector per input text, same order

        Raises:
            EmbeddingError: When any batch fails
        """
        vectors: list[list[float]] = []
        for batch in self._batches(texts):
            try:
                result = self._embeddings.embed_documents(batch)
            except Exception as e:
                raise EmbeddingError(
                    f"Failed to generate embeddings: {e}",
                    details={"batch_size": len(batch), "embedded": len(vectors)},
                ) from e
            vectors.extend(self._check_batch(batch, result))
        return vectors

    async def aembed(self, text: str) -> list[float]:
        """Async variant of :meth:`embed`."""
        try:
            vector = await self._embeddings.aembed_query(text)
        except Exception as e:
            raise EmbeddingError(f"Failed to embed query: {e}") from e
        return self._check(vector)

    async def aembed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """Async variant of :meth:`embed_batch`."""
        vectors: list[list[float]] = []
        for batch in self._batches(texts):
            try:
                result = await self._embeddings.aembed_documents(batch)
            except Exception as e:
                raise EmbeddingError(
                    f"Failed to generate embeddings: {e}",
                    details={"batch_size": len(batch), "embedded": len(vectors)},
                ) from e
            vectors.extend(self._check_batch(batch, result))
        return vectors

    def _batches(self, texts: Sequence[str]) -> list[list[str]]:
        items = list(texts)
        return [
            items[start:start + self._batch_size]
            for start in range(0, len(items), self._batch_size)
        ]

    def _check_batch(self, batch: list[str], result: list[list[float]]) -> list[list[float]]:
        if len(result) != len(batch):
            raise EmbeddingError(
                "Embedding model returned wrong number of vectors",
                details={"expected": len(batch), "received": len(result)},
            )
        return [self._check(vector) for vector in result]

    def _check(self, vector: Sequence[float]) -> list[float]:
        values = [float(v) for v in vector]
        if not values:
            raise EmbeddingError("Embedding model returned an empty vector")
        if self._dimension is None:
            self._dimension = len(values)
            logger.info("Embedding dimension established", extra={"dimension": self._dimension})
        elif len(values) != self._dimension:
            raise EmbeddingError(
                "Embedding model changed vector dimension",
                details={"expected": self._dimension, "received": len(values)},
            )
        return values
