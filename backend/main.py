from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from loguru import logger

from backend.config import Settings, get_settings
from backend.errors import (
    GENERIC_ERROR_MESSAGE,
    CorsRejected,
    InternalError,
    InvalidInput,
    MalformedUpstreamResponse,
    RelayError,
    UpstreamError,
)
from backend.log import setup_logger
from backend.models import ChatRequest, HealthResponse, ImageRequest
from backend.providers import HTTPProviders, Providers
from backend.relays import relay_chat, relay_image

CHAT_FAILURE = "An error occurred while processing your request"
IMAGE_FAILURE = "Image generation failed"

CORS_METHODS = ["GET", "POST", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization", "Accept"]


# ================================ CORS ================================

class PreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware that answers accepted pre-flights with an empty 204."""

    def preflight_response(self, request_headers):
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return Response(status_code=204, headers=headers)


def origin_allowed(origin: str | None, allowed_origins) -> bool:
    # No Origin header means same-origin or a non-browser client
    return not origin or origin in allowed_origins


# ================================ DEPENDENCIES ================================

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_providers(request: Request) -> Providers:
    return request.app.state.providers


# ================================ RESPONSES ================================

def error_response(error: RelayError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def internal_error(failure_message: str, exc: Exception, settings: Settings, *, always_detail: bool) -> RelayError:
    if settings.is_development:
        detail = str(exc)
    elif always_detail:
        detail = GENERIC_ERROR_MESSAGE
    else:
        detail = None
    return InternalError(failure_message, detail=detail)


def relay_response(result, failure_message: str, settings: Settings, *, always_detail: bool):
    if not isinstance(result, RelayError):
        return result

    if isinstance(result, UpstreamError):
        logger.error("{} API error ({}): {}", result.provider, result.status_code, result.details)
    elif isinstance(result, MalformedUpstreamResponse):
        logger.error("Malformed {} API response: {!r}", result.provider, result.payload)
        result = internal_error(failure_message, result, settings, always_detail=always_detail)
    elif isinstance(result, InvalidInput):
        logger.debug("Rejected request: {}", result.message)
    return error_response(result)


# ================================ APP ================================

def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logger(settings.LOG_LEVEL)
        app.state.providers = HTTPProviders.from_settings(settings)
        try:
            yield
        finally:
            await app.state.providers.aclose()

    app = FastAPI(title="Adventure Relay", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        PreflightCORSMiddleware,
        allow_origins=list(settings.ALLOWED_ORIGINS),
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    # Registered after CORS so it runs first
    @app.middleware("http")
    async def reject_unknown_origins(request: Request, call_next):
        origin = request.headers.get("origin")
        if not origin_allowed(origin, settings.ALLOWED_ORIGINS):
            logger.warning("Blocked by CORS: {}", origin)
            return error_response(CorsRejected(origin))
        return await call_next(request)

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        logger.debug("Invalid request body on {}: {}", request.url.path, exc.errors())
        return error_response(InvalidInput("Invalid request body"))

    # ----- HEALTH CHECK -----
    @app.get("/api/health", response_model=HealthResponse)
    async def health():
        now = datetime.now(timezone.utc)
        return HealthResponse(timestamp=now.isoformat(timespec="milliseconds").replace("+00:00", "Z"))

    # ----- AI CHAT -----
    @app.post("/api")
    async def chat(
        req: ChatRequest,
        providers: Providers = Depends(get_providers),
        settings: Settings = Depends(get_app_settings),
    ):
        try:
            result = await relay_chat(req, providers)
        except Exception as e:
            logger.exception("Error during Cohere API call")
            result = internal_error(CHAT_FAILURE, e, settings, always_detail=True)
        return relay_response(result, CHAT_FAILURE, settings, always_detail=True)

    # ----- AI IMAGE -----
    @app.post("/generate-image")
    async def generate_image(
        req: ImageRequest,
        providers: Providers = Depends(get_providers),
        settings: Settings = Depends(get_app_settings),
    ):
        if req.prompt:
            logger.info("Generating image with prompt: {}", req.prompt)
        try:
            result = await relay_image(req, providers)
        except Exception as e:
            logger.exception("Error generating image")
            result = internal_error(IMAGE_FAILURE, e, settings, always_detail=False)
        return relay_response(result, IMAGE_FAILURE, settings, always_detail=False)

    # ----- PRE-FLIGHT -----
    @app.options("/{path:path}", include_in_schema=False)
    async def preflight(path: str):
        return Response(status_code=204)

    return app


app = create_app()
