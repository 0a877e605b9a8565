"""
Retrieval pipeline configuration settings.

Chunking policy, embedding model selection and vector index location.
Values are fixed at service start; the chunker validates the chunk policy.

Dependencies: pydantic, pydantic_settings
System role: Configuration for chunking, embedding and index persistence
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from pdfchat.configs.base import BaseSettings


class RetrievalSettings(BaseSettings):
    """Chunking, embedding and vector index configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking
    chunk_size: int = Field(default=1000, description="Maximum chunk size in characters")
    chunk_overlap: int = Field(
        default=200,
        description="Characters shared between consecutive chunks (must be < chunk_size)",
    )

    # Search
    top_k: int = Field(default=3, description="Number of passages retrieved per query", ge=1)

    # Persistence
    index_dir: str = Field(
        default="./faiss_store",
        description="Directory holding the persisted vector index",
    )

    # Embedding model
    embedding_provider: str = Field(
        default="huggingface",
        description="Embedding backend: 'huggingface', 'ollama', 'google' or 'fake'",
    )
    embedding_model: str = Field(
        default="sentence-transformers/all-MiniLM-L6-v2",
        description="Model identifier passed to the embedding backend",
    )
    embedding_base_url: str = Field(
        default="http://localhost:11434",
        description="Base URL for the Ollama embedding backend",
    )
    embedding_dimension: int = Field(
        default=384,
        description="Vector size produced by the 'fake' backend",
    )
    embedding_batch_size: int = Field(
        default=64,
        description="Maximum number of texts sent to the embedding model per call",
        ge=1,
    )
