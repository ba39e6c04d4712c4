from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from src.config import Settings, get_settings
from src.db.base import SchoolRepository
from src.db.factory import get_school_repository
from src.schemas.chat import ChatRequest, ChatResponse
from src.services.chat import handle_message

router = APIRouter(tags=["chat"])


@router.post("/api/chat", response_model=ChatResponse)
async def chat_message(
    message: ChatRequest,
    repo: Annotated[SchoolRepository, Depends(get_school_repository)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ChatResponse:
    """Answer a chat command such as ``find harare cambridge boarding``."""
    reply = await handle_message(message.sender, message.body, repo, settings)
    return ChatResponse(reply=reply.text, media_urls=reply.media_urls)
