from typing import Any

GENERIC_ERROR_MESSAGE = "Internal server error"


class RelayError(Exception):
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class InvalidInput(RelayError):
    status_code = 400


class CorsRejected(RelayError):
    status_code = 403

    def __init__(self, origin: str) -> None:
        super().__init__("Not allowed by CORS")
        self.origin = origin


# Provider answered non-2xx: status and body pass through to the client
class UpstreamError(RelayError):
    def __init__(self, provider: str, status_code: int, details: Any) -> None:
        super().__init__(f"{provider} API error")
        self.provider = provider
        self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "details": self.details}


class InternalError(RelayError):
    status_code = 500

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.detail is not None:
            body["message"] = self.detail
        return body


class MalformedUpstreamResponse(InternalError):
    def __init__(self, provider: str, payload: Any) -> None:
        super().__init__(f"Unexpected {provider} API response")
        self.provider = provider
        self.payload = payload
