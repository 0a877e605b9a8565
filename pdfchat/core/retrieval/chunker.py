"""
Text chunking using RecursiveCharacterTextSplitter.

Splits raw text into overlapping, size-bounded chunks while preferring
paragraph, line, sentence and word boundaries over mid-word cuts.

Dependencies: langchain_text_splitters, pdfchat.models.chunk
System role: First stage of the ingestion flow
"""

import logging
from collections.abc import Mapping, Sequence

from langchain_text_splitters import RecursiveCharacterTextSplitter

from pdfchat.core.exceptions import ConfigError
from pdfchat.models.chunk import Chunk

logger = logging.getLogger(__name__)

# Highest priority first; "" falls back to single characters.
DEFAULT_SEPARATORS: list[str] = ["\n\n", "\n", ". ", "! ", "? ", " ", ""]


class TextChunker:
    """Split text into overlapping chunks of at most ``chunk_size`` characters."""

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        separators: list[str] | None = None,
    ) -> None:
        """
        Initialize chunker with splitter configuration.

        Args:
            chunk_size: Maximum chunk size in characters
            chunk_overlap: Maximum characters shared by consecutive chunks
            separators: Boundaries to split on, highest priority first

        Raises:
            ConfigError: When chunk_size is not positive or overlap >= size
        """
        if chunk_size <= 0:
            raise ConfigError(
                f"chunk_size must be positive, got {chunk_size}",
                setting="chunk_size",
            )
        if chunk_overlap < 0 or chunk_overlap >= chunk_size:
            raise ConfigError(
                f"chunk_overlap ({chunk_overlap}) must be >= 0 and < chunk_size ({chunk_size})",
                setting="chunk_overlap",
                details={"chunk_size": chunk_size, "chunk_overlap": chunk_overlap},
            )

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

        # Separators stay attached to the preceding text and whitespace is kept,
        # so chunks laid out at their start offsets cover the input exactly.
        self._splitter = RecursiveCharacterTextSplitter(
            separators=separators or DEFAULT_SEPARATORS,
            keep_separator="end",
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            add_start_index=True,
            strip_whitespace=False,
            length_function=len,
        )

    def split(
        self,
        text: str,
        source: str = "user",
        metadata: Mapping[str, str] | None = None,
        first_index: int = 0,
    ) -> list[Chunk]:
        """
        Split one text into chunks.

        Args:
            text: Raw text to split
            source: Source identifier stored on every chunk
            metadata: Extra metadata copied onto every chunk
            first_index: Sequence index assigned to the first chunk

        Returns:
            list[Chunk]: Chunks in source order; empty for empty or
            whitespace-only input
        """
        if not text.strip():
            return []

        extra = dict(metadata or {})
        documents = self._splitter.create_documents([text])
        return [
            Chunk(
                text=doc.page_content,
                source=source,
                metadata=extra,
                sequence_index=first_index + position,
                start_index=doc.metadata["start_index"],
            )
            for position, doc in enumerate(documents)
        ]

    def split_all(
        self,
        texts: Sequence[str],
        source: str = "user",
        metadata: Mapping[str, str] | None = None,
    ) -> list[Chunk]:
        """
        Split several texts, numbering chunks with one running sequence index.

        Args:
            texts: Raw texts in ingestion order
            source: Source identifier shared by all texts
            metadata: Extra metadata shared by all texts

        Returns:
            list[Chunk]: Chunks of every text, in order
        """
        chunks: list[Chunk] = []
        for text in texts:
            chunks.extend(self.split(text, source, metadata, first_index=len(chunks)))

        logger.debug(
            "Split texts into chunks",
            extra={"text_count": len(texts), "chunk_count": len(chunks)},
        )
        return chunks
