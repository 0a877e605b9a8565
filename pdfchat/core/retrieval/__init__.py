"""
Retrieval core.

Chunker, embedding adapter, exact vector index and the pipeline that
orchestrates ingestion and query flows.
"""

from pdfchat.core.retrieval.chunker import TextChunker
from pdfchat.core.retrieval.embedder import EmbeddingAdapter
from pdfchat.core.retrieval.pipeline import (
    CONTEXT_SEPARATOR,
    IngestionStage,
    QueryStage,
    RetrievalPipeline,
)
from pdfchat.core.retrieval.vector_index import BaseVectorIndex, VectorIndex

__all__ = [
    "BaseVectorIndex",
    "CONTEXT_SEPARATOR",
    "EmbeddingAdapter",
    "IngestionStage",
    "QueryStage",
    "RetrievalPipeline",
    "TextChunker",
    "VectorIndex",
]
