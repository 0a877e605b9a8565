"""
Health check API endpoints.

Routes: GET /health, GET /health/index

Dependencies: pdfchat.core.retrieval
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from pdfchat.api.deps import get_retrieval_pipeline
from pdfchat.core.retrieval.pipeline import RetrievalPipeline


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


class IndexHealthResponse(BaseModel):
    """Vector index status."""

    status: str
    record_count: int
    dimension: int | None
    ingestion_stage: str


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/index", response_model=IndexHealthResponse)
async def health_check_index(
    pipeline: RetrievalPipeline = Depends(get_retrieval_pipeline),
) -> IndexHealthResponse:
    """Vector index health check; loads the index if not loaded yet."""
    status = await pipeline.status()
    return IndexHealthResponse(status="healthy", **status)
