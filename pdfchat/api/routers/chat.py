"""Chat API endpoint.

Routes:
- POST /chat - Answer a message from retrieved context

Dependencies: pdfchat.core.retrieval, pdfchat.boundary.llm
System role: Query Gateway
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from pdfchat.api.deps import get_answer_generator, get_retrieval_pipeline
from pdfchat.boundary.llm.chat_client import AnswerGenerator
from pdfchat.core.exceptions import ValidationError
from pdfchat.core.retrieval.pipeline import RetrievalPipeline
from pdfchat.models.chat import ChatRequest, ChatResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def chat(
    request: ChatRequest,
    pipeline: RetrievalPipeline = Depends(get_retrieval_pipeline),
    generator: AnswerGenerator = Depends(get_answer_generator),
):
    """Answer a chat message.

    Flow:
    1. Build context from the top-k passages for the message
    2. Send context and message to the chat model
    3. Return its answer

    Returns:
        ChatResponse: Generated answer

    Errors:
        400: Empty message
        500: Embedding, index or generation failure (cause is logged)
    """
    try:
        context = await pipeline.build_context(request.message)
        answer = await generator.generate(context, request.message)
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"error": e.message})
    except Exception as e:
        logger.exception(
            "Chat error",
            extra={"error_type": type(e).__name__, "error_msg": str(e)},
        )
        return JSONResponse(status_code=500, content={"error": "Failed to process request"})

    return ChatResponse(response=answer)
