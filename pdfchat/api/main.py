"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, pdfchat.api.routers, pdfchat.observability, uvicorn
System role: API entry point with router assembly
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pdfchat.api.deps.dependencies import get_service_cache
from pdfchat.observability.logger import configure_logging
from pdfchat.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

from .routers import chat_router, documents_router, health_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Builds the shared services before serving so configuration errors stop
    startup instead of failing the first request. The vector index itself is
    still loaded lazily by the first request.
    """
    cache = get_service_cache()
    configure_logging(cache.settings.log_level)

    logger.info("Pre-warming service cache...")
    # Embedding model construction may load weights from disk
    await asyncio.to_thread(lambda: cache.pipeline)
    _ = cache.answer_generator
    _ = cache.pdf_extractor

    upload_dir = cache.settings.server.upload_dir
    if upload_dir:
        Path(upload_dir).mkdir(parents=True, exist_ok=True)
    logger.info("Service cache pre-warmed")

    yield

    cache.clear()
    logger.info("Service cache cleared")


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 with the gateway error shape."""
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = first.get("msg", "Invalid request")
    message = f"{location}: {detail}" if location else detail
    logger.info("Request rejected", extra={"path": request.url.path, "error_msg": message})
    return JSONResponse(status_code=400, content={"error": message})


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="pdfchat RAG API",
        description="Chat with typed text and uploaded PDFs through retrieval-augmented generation",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(health_router, prefix="/api")
    app.include_router(chat_router, prefix="/api")
    app.include_router(documents_router, prefix="/api")

    return app


app = create_app()
