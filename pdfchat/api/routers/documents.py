"""
Document ingestion API endpoints.

Routes: POST /initialize, POST /upload

Dependencies: pdfchat.core.retrieval, pdfchat.boundary.pdf, pdfchat.models
System role: Ingestion Gateway
"""

import asyncio
import logging
import shutil
import tempfile
from pathlib import Path

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from pdfchat.api.deps import (
    get_pdf_extractor,
    get_retrieval_pipeline,
    get_settings_dependency,
)
from pdfchat.boundary.pdf.pdf_extractor import PdfTextExtractor
from pdfchat.configs import Settings
from pdfchat.core.exceptions import ParsingError, ValidationError
from pdfchat.core.retrieval.pipeline import RetrievalPipeline
from pdfchat.models.chat import ErrorResponse
from pdfchat.models.document import InitializeRequest, InitializeResponse, UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["documents"])

ALLOWED_EXTENSIONS = {".pdf"}
TEMP_DIR_PREFIX = "pdfchat_"
_READ_BLOCK = 1024 * 1024


def cleanup_temp_file(file_path: str) -> None:
    """
    Safely remove temporary file and its parent temp directory.

    Missing files are ignored; failures are logged, never raised.

    Args:
        file_path: Path to file to remove
    """
    try:
        path = Path(file_path)
        parent_dir = path.parent

        path.unlink(missing_ok=True)
        logger.debug("Cleaned up temp file", extra={"file_path": file_path})

        # Only directories created by this module are removed
        if parent_dir.exists() and parent_dir.name.startswith(TEMP_DIR_PREFIX):
            shutil.rmtree(parent_dir, ignore_errors=True)
            logger.debug("Cleaned up temp directory", extra={"temp_dir": str(parent_dir)})

    except Exception as e:
        logger.warning(
            "Failed to cleanup temp file",
            extra={"file_path": file_path, "error": str(e)},
        )


async def save_upload(file: UploadFile, destination: Path, max_bytes: int) -> int:
    """
    Stream an upload to disk, enforcing a size limit.

    Returns:
        int: Bytes written

    Raises:
        ValidationError: When the upload exceeds max_bytes
    """
    written = 0
    with destination.open("wb") as out:
        while block := await file.read(_READ_BLOCK):
            written += len(block)
            if written > max_bytes:
                raise ValidationError(
                    f"File too large. Maximum size: {max_bytes // (1024 * 1024)}MB",
                    field="file",
                )
            out.write(block)
    return written


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post(
    "/initialize",
    response_model=InitializeResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def initialize(
    request: InitializeRequest,
    pipeline: RetrievalPipeline = Depends(get_retrieval_pipeline),
):
    """
    Index raw texts typed by the user.

    Returns:
        InitializeResponse: Number of chunks indexed
    """
    try:
        result = await pipeline.ingest(request.documents, {"source": "user"})
    except ValidationError as e:
        return _error(400, e.message)
    except Exception as e:
        logger.exception(
            "Initialization error",
            extra={"error_type": type(e).__name__, "error_msg": str(e)},
        )
        return _error(500, "Failed to index documents")

    return InitializeResponse(chunks=result.chunk_count)


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_document(
    file: UploadFile | None = File(default=None),
    pipeline: RetrievalPipeline = Depends(get_retrieval_pipeline),
    extractor: PdfTextExtractor = Depends(get_pdf_extractor),
    settings: Settings = Depends(get_settings_dependency),
):
    """
    Upload a PDF, extract its pages and index them.

    The upload is written to a private temp directory that is removed on
    every exit path, including failures before the file exists.

    Returns:
        UploadResponse: Page and chunk counts

    Errors:
        400: No file, non-PDF file, oversized file or unreadable PDF
        500: Embedding, index or persistence failure (cause is logged)
    """
    if file is None or not file.filename:
        return _error(400, "No file uploaded")

    original_name = file.filename
    extension = Path(original_name).suffix.lower()
    if extension not in ALLOWED_EXTENSIONS:
        return _error(400, "Only PDF files are supported")

    logger.info("Document upload received", extra={"original_name": original_name})

    file_path: Path | None = None
    try:
        temp_dir = Path(tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX, dir=settings.server.upload_dir))
        file_path = temp_dir / f"upload{extension}"
        await save_upload(file, file_path, settings.server.max_upload_bytes)
        pages = await asyncio.to_thread(extractor.extract, str(file_path))
        result = await pipeline.ingest(
            pages,
            {"source": original_name, "type": "pdf", "pages": len(pages)},
        )
    except (ValidationError, ParsingError) as e:
        logger.warning(
            "Upload rejected",
            extra={"original_name": original_name, "error_msg": str(e)},
        )
        return _error(400, e.message)
    except Exception as e:
        logger.exception(
            "Upload error",
            extra={
                "original_name": original_name,
                "error_type": type(e).__name__,
                "error_msg": str(e),
            },
        )
        return _error(500, "Failed to process document")
    finally:
        if file_path is not None:
            cleanup_temp_file(str(file_path))

    return UploadResponse(pages=len(pages), chunks=result.chunk_count)
