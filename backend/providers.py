from typing import Any, Protocol

import httpx

from backend.config import Settings


class Providers(Protocol):
    async def chat(self, payload: dict[str, Any]) -> httpx.Response:
        ...

    async def text_to_image(self, payload: dict[str, Any]) -> httpx.Response:
        ...


class HTTPProviders:
    """Cohere chat and Hugging Face inference over a shared httpx client."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient) -> None:
        self._settings = settings
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> "HTTPProviders":
        # upstream model URLs may redirect
        client = httpx.AsyncClient(
            timeout=settings.UPSTREAM_TIMEOUT,
            follow_redirects=True,
            transport=transport,
        )
        return cls(settings, client)

    async def chat(self, payload: dict[str, Any]) -> httpx.Response:
        return await self._client.post(
            self._settings.COHERE_API_URL,
            json=payload,
            headers=_bearer(self._settings.COHERE_API_KEY),
        )

    async def text_to_image(self, payload: dict[str, Any]) -> httpx.Response:
        return await self._client.post(
            self._settings.HUGGING_FACE_API_URL,
            json=payload,
            headers=_bearer(self._settings.HUGGING_FACE_API_KEY),
        )

    async def aclose(self) -> None:
        await self._client.aclose()


def _bearer(api_key: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key}"}
