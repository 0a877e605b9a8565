"""Pydantic models shared between the retrieval core and the HTTP layer."""

from pdfchat.models.chunk import Chunk, IndexRecord, IngestionResult, QueryResult

__all__ = ["Chunk", "IndexRecord", "IngestionResult", "QueryResult"]
