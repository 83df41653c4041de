"""
Chat Router
Single-turn prompt forwarding to the OpenAI chat model
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from app.schemas.chat import ChatRequest, ChatResponse
from app.schemas.common import ErrorResponse
from app.services.llm_service import LLMService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["AI Chat"])


def get_llm_service_dep(request: Request) -> LLMService:
    service = getattr(request.app.state, "llm_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Chat service unavailable")
    return service


@router.post(
    "/api/gpt",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def chat_with_gpt(
    payload: Optional[ChatRequest] = None,
    llm_service: LLMService = Depends(get_llm_service_dep)
):
    prompt = payload.prompt if payload else None
    if not prompt:
        raise HTTPException(status_code=400, detail="Prompt is required")

    try:
        reply = await llm_service.complete(prompt)
    except Exception as e:
        logger.error(f"Error getting GPT response: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to get GPT response")

    return ChatResponse(response=reply)
