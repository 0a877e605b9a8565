"""
Chat API contracts.

Dependencies: pydantic
System role: Query Gateway request/response schemas
"""

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request schema for chat messages."""

    message: str = Field(description="User question or message")


class ChatResponse(BaseModel):
    """Response schema for chat messages."""

    response: str = Field(description="Generated answer")


class ErrorResponse(BaseModel):
    """Error body returned by every gateway."""

    error: str
