"""
Test suite for document ingestion endpoints.

Tests POST /api/initialize and POST /api/upload, including temp file
cleanup on every exit path.

System role: Verification of the Ingestion Gateway
"""

from pathlib import Path

import pytest

from pdfchat.configs import Settings
from pdfchat.configs.server import ServerSettings
from pdfchat.core.exceptions import ParsingError
from pdfchat.core.retrieval.vector_index import INDEX_FILENAME, VectorIndex
from tests.conftest import FailingEmbeddings


def _pdf(name: str = "report.pdf", content: bytes = b"%PDF-1.4 test document"):
    return {"file": (name, content, "application/pdf")}


class TestInitializeEndpoint:
    """Test suite for POST /api/initialize."""

    def test_initialize_indexes_documents(self, client, index_dir: Path) -> None:
        """Should chunk, index and persist typed texts."""
        response = client.post("/api/initialize", json={"documents": ["The cat sat.", "The dog ran."]})

        assert response.status_code == 200
        assert response.json() == {"success": True, "chunks": 2}
        assert len(VectorIndex.load(index_dir)) == 2

    def test_initialize_tags_source_user(self, client, api_pipeline) -> None:
        """Should mark typed texts with source 'user'."""
        client.post("/api/initialize", json={"documents": ["The cat sat."]})

        record = next(VectorIndex.load(api_pipeline.index_dir).records())

        assert record.chunk.source == "user"

    def test_initialize_empty_list(self, client) -> None:
        """Should accept an empty list and index nothing."""
        response = client.post("/api/initialize", json={"documents": []})

        assert response.status_code == 200
        assert response.json() == {"success": True, "chunks": 0}

    @pytest.mark.parametrize(
        "body",
        [{}, {"documents": "just a string"}, {"documents": [1, 2]}, {"documents": None}],
    )
    def test_initialize_invalid_body(self, client, body) -> None:
        """Should return 400 with an error body for malformed input."""
        response = client.post("/api/initialize", json=body)

        assert response.status_code == 400
        assert "error" in response.json()

    def test_initialize_embedding_failure(self, client, app, make_pipeline, index_dir: Path) -> None:
        """Should return a generic 500 and persist nothing."""
        from pdfchat.api.deps import get_retrieval_pipeline

        failing = make_pipeline(FailingEmbeddings(fail_on_call=1))
        app.dependency_overrides[get_retrieval_pipeline] = lambda: failing

        response = client.post("/api/initialize", json={"documents": ["The cat sat."]})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to index documents"}
        assert not (index_dir / INDEX_FILENAME).exists()


class TestUploadEndpoint:
    """Test suite for POST /api/upload."""

    def test_upload_pdf(self, client, extractor, upload_dir: Path, index_dir: Path) -> None:
        """Should extract pages, index them and remove the temp file."""
        seen_paths: list[Path] = []

        def extract(file_path: str) -> list[str]:
            path = Path(file_path)
            seen_paths.append(path)
            assert path.read_bytes() == b"%PDF-1.4 test document"
            return ["The cat sat on page one.", "The dog ran on page two."]

        extractor.extract.side_effect = extract

        response = client.post("/api/upload", files=_pdf())

        assert response.status_code == 200
        assert response.json() == {"success": True, "pages": 2, "chunks": 2}
        assert seen_paths[0].parent.parent == upload_dir
        assert not seen_paths[0].exists()
        assert list(upload_dir.iterdir()) == []

    def test_upload_tags_chunks_with_file_metadata(self, client, index_dir: Path) -> None:
        """Should tag chunks with original name, type and page count."""
        client.post("/api/upload", files=_pdf("Annual Report.PDF"))

        record = next(VectorIndex.load(index_dir).records())

        assert record.chunk.source == "Annual Report.PDF"
        assert record.chunk.metadata == {"type": "pdf", "pages": "2"}

    def test_upload_without_file(self, client, upload_dir: Path) -> None:
        """Should return 400 when no file part is sent."""
        response = client.post("/api/upload")

        assert response.status_code == 400
        assert response.json() == {"error": "No file uploaded"}
        assert list(upload_dir.iterdir()) == []

    def test_upload_non_pdf(self, client, extractor) -> None:
        """Should reject other file types before touching the disk."""
        response = client.post("/api/upload", files={"file": ("notes.txt", b"hello", "text/plain")})

        assert response.status_code == 400
        assert response.json() == {"error": "Only PDF files are supported"}
        extractor.extract.assert_not_called()

    def test_upload_unreadable_pdf(self, client, extractor, upload_dir: Path, index_dir: Path) -> None:
        """Should return 400 for parsing failures and still clean up."""
        extractor.extract.side_effect = ParsingError("PDF processing failed: EOF marker not found")

        response = client.post("/api/upload", files=_pdf())

        assert response.status_code == 400
        assert response.json() == {"error": "PDF processing failed: EOF marker not found"}
        assert list(upload_dir.iterdir()) == []
        assert not index_dir.exists()

    def test_upload_too_large(self, client, app, extractor, upload_dir: Path) -> None:
        """Should refuse uploads above the size limit."""
        from pdfchat.api.deps import get_settings_dependency

        small = Settings(server=ServerSettings(upload_dir=str(upload_dir), max_upload_bytes=8))
        app.dependency_overrides[get_settings_dependency] = lambda: small

        response = client.post("/api/upload", files=_pdf())

        assert response.status_code == 400
        assert response.json()["error"].startswith("File too large")
        extractor.extract.assert_not_called()
        assert list(upload_dir.iterdir()) == []

    def test_upload_dir_missing(self, client, app, upload_dir: Path) -> None:
        """Should answer with the JSON error body when the temp dir cannot be made."""
        from pdfchat.api.deps import get_settings_dependency

        missing = Settings(server=ServerSettings(upload_dir=str(upload_dir / "absent")))
        app.dependency_overrides[get_settings_dependency] = lambda: missing

        response = client.post("/api/upload", files=_pdf())

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process document"}
        assert list(upload_dir.iterdir()) == []

    def test_upload_indexing_failure(self, client, app, make_pipeline, upload_dir: Path) -> None:
        """Should return a generic 500 when embedding fails and clean up."""
        from pdfchat.api.deps import get_retrieval_pipeline

        failing = make_pipeline(FailingEmbeddings(fail_on_call=1))
        app.dependency_overrides[get_retrieval_pipeline] = lambda: failing

        response = client.post("/api/upload", files=_pdf())

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process document"}
        assert list(upload_dir.iterdir()) == []

    def test_uploaded_text_is_retrievable(self, client, generator) -> None:
        """Should make uploaded pages available to chat."""
        client.post("/api/upload", files=_pdf())

        client.post("/api/chat", json={"message": "Where did the dog run?"})

        context = generator.generate.await_args.args[0]
        assert context.startswith("The dog ran on page two.")
