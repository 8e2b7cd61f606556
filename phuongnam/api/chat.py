"""
AI Chat Endpoints (/api/chat)

A chat request never fails because of the AI provider: timeouts and
provider errors are answered with the static menu (``fallback: true``).
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends

from phuongnam.api.deps import get_service
from phuongnam.core.responses import success_response
from phuongnam.schemas import ChatRequest, FoodDescriptionRequest
from phuongnam.services.ai import ChatMessage, ChatService
from phuongnam.services.ai.content import DESCRIPTION_UNAVAILABLE, RESTAURANT_INFO, SUGGESTED_QUESTIONS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["Chat"])

chat_service = get_service("chat")


@router.post("", summary="Chat With The Assistant")
async def send_message(
    body: ChatRequest,
    service: ChatService = Depends(chat_service),
) -> dict[str, Any]:
    messages = [ChatMessage(role=m.role, content=m.content) for m in body.messages]
    result = await service.chat(
        messages,
        use_groq=body.options.useGroq,
        temperature=body.options.temperature,
        max_tokens=body.options.maxTokens,
    )

    meta = {"error": result.error} if result.error else {}
    return success_response(
        data={
            "reply": result.message,
            "provider": result.provider,
            "model": result.model,
            "fallback": result.is_fallback,
        },
        message="Reply generated",
        **meta,
    )


@router.post("/generate-description", summary="Generate Dish Description")
async def generate_description(
    body: FoodDescriptionRequest,
    service: ChatService = Depends(chat_service),
) -> dict[str, Any]:
    name = body.foodName.strip()
    description = await service.generate_description(name, body.ingredients, body.category)
    return success_response(
        data={
            "foodName": name,
            "description": description or DESCRIPTION_UNAVAILABLE,
            "generated": description is not None,
        }
    )


@router.get("/status", summary="AI Provider Status")
async def service_status(service: ChatService = Depends(chat_service)) -> dict[str, Any]:
    return success_response(data=service.status())


@router.get("/restaurant-info", summary="Restaurant Profile")
async def restaurant_info() -> dict[str, Any]:
    return success_response(data=RESTAURANT_INFO)


@router.get("/suggested-questions", summary="Suggested Questions")
async def suggested_questions() -> dict[str, Any]:
    return success_response(
        data={"questions": SUGGESTED_QUESTIONS, "total": len(SUGGESTED_QUESTIONS)}
    )
