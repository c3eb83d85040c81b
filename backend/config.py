from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Relay configuration, read once from the environment (.env optional)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Upstream credentials, required
    COHERE_API_KEY: str = Field(..., min_length=1)
    HUGGING_FACE_API_KEY: str = Field(..., min_length=1)

    # Upstream endpoints
    COHERE_API_URL: str = "https://api.cohere.com/v2/chat"
    HUGGING_FACE_API_URL: str = (
        "https://api-inference.huggingface.co/models/"
        "stabilityai/stable-diffusion-3-medium-diffusers"
    )
    UPSTREAM_TIMEOUT: float = Field(60.0, gt=0, description="Seconds per upstream call")

    # CORS
    ALLOWED_ORIGINS: tuple[str, ...] = ("https://bengilmo1111-github-io.vercel.app",)

    # Runtime
    ENVIRONMENT: str = Field(
        "production",
        validation_alias=AliasChoices("APP_ENV", "NODE_ENV", "ENVIRONMENT"),
    )
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
