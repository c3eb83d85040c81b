from typing import Any, Literal

from pydantic import BaseModel


# Loose fields: the relays report missing or mis-shaped values as 400s.

class ChatRequest(BaseModel):
    input: str | None = None
    history: Any = None


class ImageRequest(BaseModel):
    prompt: str | None = None


class ConversationTurn(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatResponse(BaseModel):
    response: str


class ImageResponse(BaseModel):
    image: str


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: str
