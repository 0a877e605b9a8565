"""
Shared test fixtures and configuration for entire test suite.

Provides: deterministic embedding models, chunker/adapter/pipeline fixtures,
temp file helpers
Dependencies: pytest, langchain_core
System role: Test infrastructure and fixture management
"""

import re
import tempfile
from pathlib import Path

import pytest
from langchain_core.embeddings import Embeddings

from pdfchat.core.retrieval.chunker import TextChunker
from pdfchat.core.retrieval.embedder import EmbeddingAdapter
from pdfchat.core.retrieval.pipeline import RetrievalPipeline

TOKEN_RE = re.compile(r"[a-z0-9]+")


class BagOfWordsEmbeddings(Embeddings):
    """Word-count vectors over a vocabulary built as words are first seen."""

    def __init__(self, size: int = 64) -> None:
        self.size = size
        self.vocabulary: dict[str, int] = {}
        self.document_calls = 0
        self.query_calls = 0

    def _vector(self, text: str) -> list[float]:
        vector = [0.0] * self.size
        for token in TOKEN_RE.findall(text.lower()):
            slot = self.vocabulary.setdefault(token, len(self.vocabulary) % self.size)
            vector[slot] += 1.0
        return vector

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.document_calls += 1
        return [self._vector(text) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        self.query_calls += 1
        return self._vector(text)


class FailingEmbeddings(BagOfWordsEmbeddings):
    """Bag-of-words model whose N-th embed_documents call raises."""

    def __init__(self, fail_on_call: int = 1, size: int = 64) -> None:
        super().__init__(size=size)
        self.fail_on_call = fail_on_call

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        if self.document_calls + 1 >= self.fail_on_call:
            self.document_calls += 1
            raise RuntimeError("embedding backend unavailable")
        return super().embed_documents(texts)


@pytest.fixture
def embeddings() -> BagOfWordsEmbeddings:
    """Provide a deterministic bag-of-words embedding model."""
    return BagOfWordsEmbeddings()


@pytest.fixture
def chunker() -> TextChunker:
    """Provide chunker with default policy."""
    return TextChunker(chunk_size=1000, chunk_overlap=200)


@pytest.fixture
def index_dir(tmp_path: Path) -> Path:
    """Provide an index directory that does not exist yet."""
    return tmp_path / "faiss_store"


@pytest.fixture
def make_pipeline(index_dir: Path):
    """
    Build pipelines sharing the test index directory.

    Returns:
        Callable: factory(embeddings, chunk_size, chunk_overlap, batch_size, top_k)
    """

    def factory(
        embeddings: Embeddings | None = None,
        chunk_size: int = 50,
        chunk_overlap: int = 0,
        batch_size: int = 64,
        top_k: int = 3,
    ) -> RetrievalPipeline:
        return RetrievalPipeline(
            chunker=TextChunker(chunk_size=chunk_size, chunk_overlap=chunk_overlap),
            embedder=EmbeddingAdapter(embeddings or BagOfWordsEmbeddings(), batch_size=batch_size),
            index_dir=index_dir,
            top_k=top_k,
        )

    return factory


@pytest.fixture
def pipeline(make_pipeline, embeddings: BagOfWordsEmbeddings) -> RetrievalPipeline:
    """Provide pipeline with chunk_size=50, chunk_overlap=0 and bag-of-words embeddings."""
    return make_pipeline(embeddings)


@pytest.fixture
def temp_file():
    """
    Create a temporary file for testing cleanup.

    Yields:
        Path: Path to temporary file
    """
    with tempfile.NamedTemporaryFile(suffix=".txt", delete=False) as f:
        temp_path = Path(f.name)
        f.write(b"test content")

    yield temp_path

    if temp_path.exists():
        temp_path.unlink()


@pytest.fixture
def temp_dir():
    """
    Create a pdfchat_ prefixed temp directory like the upload handler does.

    Yields:
        Path: Path to temporary directory
    """
    import shutil

    temp_path = Path(tempfile.mkdtemp(prefix="pdfchat_"))

    yield temp_path

    if temp_path.exists():
        shutil.rmtree(temp_path, ignore_errors=True)
