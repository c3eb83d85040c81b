import base64
from typing import Any

from backend.errors import InvalidInput, MalformedUpstreamResponse, RelayError, UpstreamError
from backend.models import ChatRequest, ChatResponse, ConversationTurn, ImageRequest, ImageResponse
from backend.providers import Providers


# ================================ CHAT ================================

COHERE_MODEL = "command-r-plus-08-2024"
MAX_TOKENS = 800
TEMPERATURE = 0.7
FREQUENCY_PENALTY = 0.5

SYSTEM_PROMPT = (
    "You are a classic text-based adventure game assistant. Outline scenarios and "
    "responses with humour and wit. The point of the game is for the user to work "
    "their way through rooms or scenarios in a castle, haunted house, magic kingdom, "
    "prison, lair or similar. Each room or scenario should have a unique description, "
    "occupants, set of items and puzzles and riddles. Not every room or scenario needs "
    "all these attributes. There should be funny side quests. The play can win the "
    "game by gathering companions to form a company, and then defeating a big, bad, "
    "final enemy or monster. Each room or scenario should have no more than one riddle "
    "or puzzle to be solved at once. When answering or constructing a new scenario, "
    "remember to take into account the previous story and messages. Try to keep your "
    "messages short."
)


def build_messages(user_input: str, history: list[dict[str, Any]]) -> list[ConversationTurn]:
    messages = [ConversationTurn(role="system", content=SYSTEM_PROMPT)]
    for entry in history:
        role = "user" if entry.get("role") == "user" else "assistant"
        messages.append(ConversationTurn(role=role, content=entry["content"]))
    messages.append(ConversationTurn(role="user", content=user_input))
    return messages


def build_chat_payload(messages: list[ConversationTurn]) -> dict[str, Any]:
    return {
        "model": COHERE_MODEL,
        "messages": [m.model_dump() for m in messages],
        "max_tokens": MAX_TOKENS,
        "temperature": TEMPERATURE,
        "frequency_penalty": FREQUENCY_PENALTY,
    }


def _validate_history(history: Any) -> InvalidInput | None:
    if not isinstance(history, list):
        return InvalidInput("History must be an array")
    for entry in history:
        if not isinstance(entry, dict) or not isinstance(entry.get("content"), str):
            return InvalidInput("History entries must have a role and text content")
    return None


def _response_body(response) -> Any:
    # gateway errors in front of the API may be plain text
    try:
        return response.json()
    except ValueError:
        return response.text


async def relay_chat(request: ChatRequest, providers: Providers) -> ChatResponse | RelayError:
    """Forward one adventure turn to Cohere. Transport errors propagate to the route."""
    if not request.input:
        return InvalidInput("Input is required")

    invalid = _validate_history(request.history)
    if invalid is not None:
        return invalid

    messages = build_messages(request.input, request.history)
    response = await providers.chat(build_chat_payload(messages))

    if not response.is_success:
        return UpstreamError("Cohere", response.status_code, _response_body(response))

    data = _response_body(response)
    try:
        text = data["message"]["content"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return MalformedUpstreamResponse("Cohere", data)
    if not isinstance(text, str):
        return MalformedUpstreamResponse("Cohere", data)

    return ChatResponse(response=text)


# ================================ IMAGE ================================

IMAGE_WIDTH = 256
IMAGE_HEIGHT = 256


def build_image_payload(prompt: str) -> dict[str, Any]:
    return {
        "inputs": prompt,
        "parameters": {"width": IMAGE_WIDTH, "height": IMAGE_HEIGHT},
    }


def to_data_uri(image_bytes: bytes) -> str:
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:image/png;base64,{encoded}"


async def relay_image(request: ImageRequest, providers: Providers) -> ImageResponse | RelayError:
    if not request.prompt:
        return InvalidInput("Prompt is required for image generation")

    response = await providers.text_to_image(build_image_payload(request.prompt))

    if not response.is_success:
        return UpstreamError("Hugging Face", response.status_code, response.text)

    # the whole image is buffered; httpx has already read it
    return ImageResponse(image=to_data_uri(response.content))
