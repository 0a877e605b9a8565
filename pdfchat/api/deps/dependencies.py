"""
Dependency injection container.

Factory functions for FastAPI dependencies. The retrieval pipeline is a
process-wide object built once and shared by every request, so all
ingestions go through the same writer lock. The application lifespan
pre-warms the cache; the lock covers callers that arrive before that or
after a clear, since sync dependencies run on worker threads.

Dependencies: pdfchat.configs, pdfchat.core.retrieval, pdfchat.boundary
System role: DI container for service injection
"""

import threading
from functools import lru_cache

from pdfchat.boundary.embeddings.embeddings_factory import create_embeddings
from pdfchat.boundary.llm.chat_client import AnswerGenerator, create_chat_model
from pdfchat.boundary.pdf.pdf_extractor import PdfTextExtractor
from pdfchat.configs import Settings, get_settings
from pdfchat.core.retrieval.chunker import TextChunker
from pdfchat.core.retrieval.embedder import EmbeddingAdapter
from pdfchat.core.retrieval.pipeline import RetrievalPipeline


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self._lock = threading.Lock()
        self._pipeline: RetrievalPipeline | None = None
        self._answer_generator: AnswerGenerator | None = None
        self._pdf_extractor: PdfTextExtractor | None = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def pipeline(self) -> RetrievalPipeline:
        """
        Get cached retrieval pipeline, building it exactly once.

        Raises:
            ConfigError: Invalid chunk policy or embedding provider
        """
        pipeline = self._pipeline
        if pipeline is not None:
            return pipeline

        with self._lock:
            if self._pipeline is None:
                self._pipeline = self._build_pipeline()
            return self._pipeline

    def _build_pipeline(self) -> RetrievalPipeline:
        retrieval = self.settings.retrieval
        return RetrievalPipeline(
            chunker=TextChunker(
                chunk_size=retrieval.chunk_size,
                chunk_overlap=retrieval.chunk_overlap,
            ),
            embedder=EmbeddingAdapter(
                create_embeddings(retrieval),
                batch_size=retrieval.embedding_batch_size,
            ),
            index_dir=retrieval.index_dir,
            top_k=retrieval.top_k,
        )

    @property
    def answer_generator(self) -> AnswerGenerator:
        """Get cached answer generator."""
        generator = self._answer_generator
        if generator is not None:
            return generator

        with self._lock:
            if self._answer_generator is None:
                llm = self.settings.llm
                self._answer_generator = AnswerGenerator(
                    create_chat_model(llm),
                    timeout_seconds=llm.timeout_seconds,
                )
            return self._answer_generator

    @property
    def pdf_extractor(self) -> PdfTextExtractor:
        """Get cached PDF text extractor."""
        if self._pdf_extractor is None:
            self._pdf_extractor = PdfTextExtractor()
        return self._pdf_extractor

    def clear(self) -> None:
        """Clear all cached instances."""
        with self._lock:
            self._pipeline = None
            self._answer_generator = None
            self._pdf_extractor = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_retrieval_pipeline() -> RetrievalPipeline:
    """
    Get the shared retrieval pipeline.

    Returns:
        RetrievalPipeline: Process-wide pipeline owning the vector index
    """
    return get_service_cache().pipeline


def get_answer_generator() -> AnswerGenerator:
    """Get the shared answer generator."""
    return get_service_cache().answer_generator


def get_pdf_extractor() -> PdfTextExtractor:
    """Get the PDF text extractor."""
    return get_service_cache().pdf_extractor
