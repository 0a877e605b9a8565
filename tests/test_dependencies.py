"""
Test suite for dependency injection container.

Tests the service cache that builds the process-wide pipeline, answer
generator and PDF extractor from settings, including concurrent first use
and startup pre-warming.

System role: Verification of DI container
"""

import asyncio
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient
from langchain_core.embeddings import DeterministicFakeEmbedding

from pdfchat.api.deps import dependencies
from pdfchat.api.deps.dependencies import ServiceCache, get_retrieval_pipeline
from pdfchat.api.main import create_app
from pdfchat.boundary.llm.chat_client import AnswerGenerator
from pdfchat.boundary.pdf.pdf_extractor import PdfTextExtractor
from pdfchat.configs import Settings
from pdfchat.configs.llm import LLMSettings
from pdfchat.configs.retrieval import RetrievalSettings
from pdfchat.configs.server import ServerSettings
from pdfchat.core.exceptions import ConfigError
from pdfchat.core.retrieval.pipeline import RetrievalPipeline
from pdfchat.core.retrieval.vector_index import VectorIndex


def _settings(tmp_path: Path, **retrieval) -> Settings:
    options = {
        "embedding_provider": "fake",
        "embedding_dimension": 8,
        "index_dir": str(tmp_path / "store"),
        "top_k": 5,
    }
    options.update(retrieval)
    return Settings(
        retrieval=RetrievalSettings(**options),
        llm=LLMSettings(provider="ollama", model="mistral", timeout_seconds=5),
        server=ServerSettings(upload_dir=str(tmp_path / "uploads")),
    )


class SlowEmbeddingsFactory:
    """Stands in for a model that takes a while to load; counts constructions."""

    def __init__(self, delay: float = 0.2) -> None:
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self, settings: RetrievalSettings) -> DeterministicFakeEmbedding:
        with self._lock:
            self.calls += 1
        time.sleep(self.delay)
        return DeterministicFakeEmbedding(size=settings.embedding_dimension)


@pytest.fixture
def slow_factory():
    """Patch the embeddings factory with a slow, counting one."""
    factory = SlowEmbeddingsFactory()
    with patch("pdfchat.api.deps.dependencies.create_embeddings", factory):
        yield factory


@pytest.fixture
def service_cache(tmp_path: Path, monkeypatch) -> ServiceCache:
    """Fresh process-wide cache backed by a temp index directory."""
    cache = ServiceCache(_settings(tmp_path))
    monkeypatch.setattr(dependencies, "_service_cache", cache)
    return cache


class TestServiceCache:
    """Test suite for ServiceCache."""

    def test_pipeline_built_from_settings(self, tmp_path: Path) -> None:
        """Pipeline uses the configured index directory."""
        cache = ServiceCache(_settings(tmp_path))

        pipeline = cache.pipeline

        assert isinstance(pipeline, RetrievalPipeline)
        assert pipeline.index_dir == tmp_path / "store"

    def test_pipeline_is_shared(self, tmp_path: Path) -> None:
        """Every caller gets the same pipeline instance."""
        cache = ServiceCache(_settings(tmp_path))
        assert cache.pipeline is cache.pipeline

    def test_answer_generator_and_extractor(self, tmp_path: Path) -> None:
        """Generator and extractor are built once."""
        cache = ServiceCache(_settings(tmp_path))

        assert isinstance(cache.answer_generator, AnswerGenerator)
        assert cache.answer_generator is cache.answer_generator
        assert isinstance(cache.pdf_extractor, PdfTextExtractor)

    def test_clear_rebuilds_services(self, tmp_path: Path) -> None:
        """Cleared cache builds fresh instances."""
        cache = ServiceCache(_settings(tmp_path))
        first = cache.pipeline

        cache.clear()

        assert cache.pipeline is not first

    def test_invalid_chunk_policy_raises_config_error(self, tmp_path: Path) -> None:
        """Bad chunk settings surface as ConfigError when the pipeline is built."""
        cache = ServiceCache(_settings(tmp_path, chunk_size=100, chunk_overlap=100))

        with pytest.raises(ConfigError):
            _ = cache.pipeline


class TestConcurrentFirstUse:
    """The shared pipeline is built once even when first requests race."""

    def test_threads_resolve_one_pipeline(self, service_cache: ServiceCache, slow_factory) -> None:
        """Concurrent dependency resolution builds exactly one pipeline."""
        start = threading.Barrier(8)

        def resolve() -> RetrievalPipeline:
            start.wait()
            return get_retrieval_pipeline()

        with ThreadPoolExecutor(max_workers=8) as pool:
            pipelines = list(pool.map(lambda _: resolve(), range(8)))

        assert slow_factory.calls == 1
        assert all(p is pipelines[0] for p in pipelines)

    @pytest.mark.asyncio
    async def test_concurrent_first_ingestions_keep_every_record(
        self, service_cache: ServiceCache, slow_factory, tmp_path: Path
    ) -> None:
        """Concurrent first requests share one pipeline and lose no records."""
        app = create_app()
        documents = ["The cat sat.", "The dog ran.", "A bird flew."]

        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            responses = await asyncio.gather(
                *(client.post("/api/initialize", json={"documents": [doc]}) for doc in documents)
            )

        assert [r.status_code for r in responses] == [200, 200, 200]
        assert slow_factory.calls == 1
        assert len(VectorIndex.load(tmp_path / "store")) == 3


class TestLifespan:
    """Startup builds services before the first request."""

    def test_startup_prewarms_services(self, service_cache: ServiceCache, tmp_path: Path) -> None:
        """Pipeline and generator exist and the upload dir is created at startup."""
        with patch("pdfchat.api.main.configure_logging"):
            with TestClient(create_app()):
                assert service_cache._pipeline is not None
                assert service_cache._answer_generator is not None
                assert (tmp_path / "uploads").is_dir()

        assert service_cache._pipeline is None

    def test_invalid_config_fails_startup(self, tmp_path: Path, monkeypatch) -> None:
        """An invalid chunk policy stops the service from starting."""
        cache = ServiceCache(_settings(tmp_path, chunk_size=100, chunk_overlap=150))
        monkeypatch.setattr(dependencies, "_service_cache", cache)

        with patch("pdfchat.api.main.configure_logging"):
            with pytest.raises(ConfigError):
                with TestClient(create_app()):
                    pass
