"""
Document ingestion API contracts.

Request/response schemas for typed-text initialization and PDF upload.

Dependencies: pydantic
System role: Ingestion Gateway request/response schemas
"""

from pydantic import BaseModel, Field


class InitializeRequest(BaseModel):
    """Request schema for indexing raw texts."""

    documents: list[str] = Field(description="Raw texts to index")


class InitializeResponse(BaseModel):
    """Response schema for typed-text ingestion."""

    success: bool = True
    chunks: int = Field(description="Number of chunks indexed")


class UploadResponse(BaseModel):
    """Response schema for PDF upload ingestion."""

    success: bool = True
    pages: int = Field(description="Number of pages extracted")
    chunks: int = Field(description="Number of chunks indexed")
