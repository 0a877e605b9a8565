"""
Fixtures for API endpoint tests.

Builds the full application with its pipeline, generator and extractor
dependencies replaced by test doubles.

Dependencies: pytest, fastapi.testclient
System role: API test infrastructure
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from pdfchat.api.deps import (
    get_answer_generator,
    get_pdf_extractor,
    get_retrieval_pipeline,
    get_settings_dependency,
)
from pdfchat.api.main import create_app
from pdfchat.configs import Settings
from pdfchat.configs.server import ServerSettings
from pdfchat.core.retrieval.pipeline import RetrievalPipeline


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    """Parent directory for upload temp dirs, so cleanup can be observed."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def settings(upload_dir: Path) -> Settings:
    """Settings pointing uploads at the test directory."""
    return Settings(server=ServerSettings(upload_dir=str(upload_dir)))


@pytest.fixture
def api_pipeline(make_pipeline, embeddings) -> RetrievalPipeline:
    """Real pipeline with bag-of-words embeddings and a temp index directory."""
    return make_pipeline(embeddings)


@pytest.fixture
def generator() -> MagicMock:
    """Answer generator returning a canned answer."""
    mock = MagicMock()
    mock.generate = AsyncMock(return_value="The cat sat on the mat.")
    return mock


@pytest.fixture
def extractor() -> MagicMock:
    """PDF extractor returning two pages."""
    mock = MagicMock()
    mock.extract.return_value = ["The cat sat on page one.", "The dog ran on page two."]
    return mock


@pytest.fixture
def app(api_pipeline, generator, extractor, settings) -> FastAPI:
    """Application with test doubles injected."""
    app = create_app()
    app.dependency_overrides[get_retrieval_pipeline] = lambda: api_pipeline
    app.dependency_overrides[get_answer_generator] = lambda: generator
    app.dependency_overrides[get_pdf_extractor] = lambda: extractor
    app.dependency_overrides[get_settings_dependency] = lambda: settings
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Provide TestClient for the FastAPI app."""
    return TestClient(app)
