"""
Retrieval pipeline orchestrator.

Coordinates the ingestion flow (chunk -> embed -> index -> persist) and the
query flow (embed -> search -> assemble context) around one shared vector
index owned by this object.

Concurrency model:
  - Ingestions are serialized by a writer lock held for the whole
    chunk/embed/add/save sequence. New records are added to a copy of the
    live index which replaces it only after a successful save, so a failed
    ingestion never leaves partial data visible or persisted.
  - Queries never take the writer lock; they read whichever index was last
    committed.
  - The first load-or-create of the index runs once under an init lock;
    concurrent first callers wait for and share its result.

Dependencies: asyncio, pdfchat.core.retrieval, pdfchat.core.exceptions
System role: Pipeline orchestration (coordinates only)
"""

import asyncio
import logging
import time
from collections.abc import Mapping, Sequence
from enum import Enum
from pathlib import Path
from typing import Any

from pdfchat.core.exceptions import IndexNotFoundError, ValidationError
from pdfchat.core.retrieval.chunker import TextChunker
from pdfchat.core.retrieval.embedder import EmbeddingAdapter
from pdfchat.core.retrieval.vector_index import VectorIndex
from pdfchat.models.chunk import IngestionResult, QueryResult
from pdfchat.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = "\n\n"
DEFAULT_SOURCE = "user"


class IngestionStage(str, Enum):
    IDLE = "idle"
    CHUNKING = "chunking"
    EMBEDDING = "embedding"
    INDEXING = "indexing"
    PERSISTING = "persisting"


class QueryStage(str, Enum):
    IDLE = "idle"
    EMBEDDING = "embedding"
    SEARCHING = "searching"
    ASSEMBLING_CONTEXT = "assembling_context"


class RetrievalPipeline:
    """Ingest texts into the shared vector index and retrieve context for queries."""

    def __init__(
        self,
        chunker: TextChunker,
        embedder: EmbeddingAdapter,
        index_dir: str | Path,
        top_k: int = 3,
    ) -> None:
        """
        Initialize pipeline with its collaborators.

        Args:
            chunker: Text chunker configured with the chunk policy
            embedder: Embedding adapter for chunks and queries
            index_dir: Directory the vector index is persisted to
            top_k: Number of passages retrieved per query
        """
        if top_k < 1:
            raise ValueError("top_k must be at least 1")
        self._chunker = chunker
        self._embedder = embedder
        self._index_dir = Path(index_dir)
        self._top_k = top_k

        self._index: VectorIndex | None = None
        self._init_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()
        self._ingestion_stage = IngestionStage.IDLE

    @property
    def index_dir(self) -> Path:
        return self._index_dir

    @property
    def ingestion_stage(self) -> IngestionStage:
        return self._ingestion_stage

    # ------------------------------------------------------------------
    # Index lifecycle
    # ------------------------------------------------------------------

    async def get_index(self) -> VectorIndex:
        """
        Return the committed index, loading or creating it on first use.

        Returns:
            VectorIndex: Current committed index

        Raises:
            VectorIndexError: When persisted state exists but is corrupted
        """
        index = self._index
        if index is not None:
            return index

        async with self._init_lock:
            if self._index is None:
                self._index = await asyncio.to_thread(self._load_or_create)
            return self._index

    def _load_or_create(self) -> VectorIndex:
        try:
            return VectorIndex.load(self._index_dir)
        except IndexNotFoundError:
            logger.warning(
                "Vector index not found, initializing new index",
                extra={"index_dir": str(self._index_dir)},
            )
            return VectorIndex()

    async def status(self) -> dict[str, Any]:
        """Summarize index size, dimension and ingestion activity."""
        index = await self.get_index()
        return {
            "record_count": len(index),
            "dimension": index.dimension,
            "ingestion_stage": self._ingestion_stage.value,
        }

    # ------------------------------------------------------------------
    # Ingestion flow
    # ------------------------------------------------------------------

    async def ingest(
        self,
        texts: Sequence[str],
        metadata: Mapping[str, Any] | None = None,
    ) -> IngestionResult:
        """
        Chunk, embed, index and persist texts as one atomic batch.

        Args:
            texts: Raw texts in order
            metadata: Shared metadata; ``source`` names the origin, remaining
                keys (type, pages, ...) are copied onto every chunk

        Returns:
            IngestionResult: Number of chunks indexed

        Raises:
            ValidationError: texts is not a sequence of strings
            EmbeddingError: Embedding model failed
            VectorIndexError: Vectors rejected by the index
            PersistenceError: Saving the index failed
        """
        self._validate_texts(texts)
        source, chunk_metadata = self._split_metadata(metadata)

        start_time = time.perf_counter()
        async with self._write_lock:
            try:
                current = await self.get_index()

                self._set_stage(IngestionStage.CHUNKING)
                chunks = await asyncio.to_thread(
                    self._chunker.split_all, list(texts), source, chunk_metadata
                )
                if not chunks:
                    logger.info("Ingestion produced no chunks", extra={"source": source})
                    return IngestionResult(chunk_count=0)

                self._set_stage(IngestionStage.EMBEDDING)
                vectors = await self._embedder.aembed_batch([chunk.text for chunk in chunks])

                self._set_stage(IngestionStage.INDEXING)
                candidate = current.copy()
                candidate.add(list(zip(vectors, chunks)))

                self._set_stage(IngestionStage.PERSISTING)
                await asyncio.to_thread(candidate.save, self._index_dir)

                self._index = candidate
            except Exception as e:
                log_exception_with_context(
                    logger,
                    "Ingestion failed, index left at last committed state",
                    e,
                    source=source,
                    stage=self._ingestion_stage.value,
                    text_count=len(texts),
                )
                raise
            finally:
                self._set_stage(IngestionStage.IDLE)

        log_with_context(
            logger,
            logging.INFO,
            "Ingestion committed",
            source=source,
            chunk_count=len(chunks),
            record_count=len(candidate),
            elapsed_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return IngestionResult(chunk_count=len(chunks))

    def _set_stage(self, stage: IngestionStage) -> None:
        self._ingestion_stage = stage
        logger.debug("Ingestion stage: %s", stage.value)

    @staticmethod
    def _validate_texts(texts: object) -> None:
        if isinstance(texts, (str, bytes)) or not isinstance(texts, Sequence):
            raise ValidationError("Documents array required", field="documents")
        for position, text in enumerate(texts):
            if not isinstance(text, str):
                raise ValidationError(
                    "Every document must be a string",
                    field="documents",
                    details={"position": position},
                )

    @staticmethod
    def _split_metadata(metadata: Mapping[str, Any] | None) -> tuple[str, dict[str, str]]:
        values = dict(metadata or {})
        source = str(values.pop("source", DEFAULT_SOURCE))
        return source, {key: str(value) for key, value in values.items()}

    # ------------------------------------------------------------------
    # Query flow
    # ------------------------------------------------------------------

    async def retrieve(self, query: str, k: int | None = None) -> list[QueryResult]:
        """
        Return the passages most similar to ``query``.

        Args:
            query: Non-empty query text
            k: Result count (defaults to the configured top_k)

        Returns:
            list[QueryResult]: Ranked results, empty when nothing is indexed

        Raises:
            ValidationError: query is empty or not a string
            EmbeddingError: Embedding model failed
        """
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("Message string required", field="message")

        index = await self.get_index()
        if len(index) == 0:
            logger.debug("Query against empty index")
            return []

        stage = QueryStage.EMBEDDING
        try:
            vector = await self._embedder.aembed(query)
            stage = QueryStage.SEARCHING
            return index.search(vector, k if k is not None else self._top_k)
        except Exception as e:
            log_exception_with_context(
                logger,
                "Retrieval failed",
                e,
                stage=stage.value,
                query_length=len(query),
            )
            raise

    async def build_context(self, query: str, k: int | None = None) -> str:
        """
        Retrieve passages and join them, best first, with blank lines.

        Returns:
            str: Context string for the generative model ("" if no passages)
        """
        results = await self.retrieve(query, k)
        logger.debug("Query stage: %s", QueryStage.ASSEMBLING_CONTEXT.value)
        context = CONTEXT_SEPARATOR.join(result.chunk.text for result in results)
        logger.info(
            "Context assembled",
            extra={"passage_count": len(results), "context_chars": len(context)},
        )
        return context
