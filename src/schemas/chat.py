from __future__ import annotations

from pydantic import BaseModel


class ChatRequest(BaseModel):
    """An inbound chat message."""

    sender: str = ""
    body: str = ""


class ChatResponse(BaseModel):
    """Reply text plus any media the channel should attach."""

    reply: str
    media_urls: list[str] = []
