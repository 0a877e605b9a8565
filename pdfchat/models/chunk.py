"""
Chunk domain models.

Represents text chunks, the records stored in the vector index and the
ranked results returned by a search.

Dependencies: pydantic
System role: Retrieval data structures
"""

from pydantic import BaseModel, ConfigDict, Field


class Chunk(BaseModel):
    """Immutable segment of source text with its provenance."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Chunk text content")
    source: str = Field(description="Source identifier (file name or 'user')")
    metadata: dict[str, str] = Field(
        default_factory=dict,
        description="Extra metadata (type, pages, ...)",
    )
    sequence_index: int = Field(description="Running position within one ingestion call", ge=0)
    start_index: int = Field(
        default=0,
        description="Character offset of the chunk within its source text",
        ge=0,
    )


class IndexRecord(BaseModel):
    """A chunk together with its embedding as held by the vector index."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Record id, equal to its insertion position")
    vector: tuple[float, ...] = Field(description="Embedding vector")
    chunk: Chunk


class QueryResult(BaseModel):
    """Single ranked search hit."""

    chunk: Chunk
    score: float = Field(description="Cosine similarity to the query vector")


class IngestionResult(BaseModel):
    """Outcome of one ingestion call."""

    chunk_count: int = Field(description="Number of chunks indexed", ge=0)
