from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
    )

    APP_ENV: str = "local"

    # S3 bucket holding the gallery images
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: SecretStr = SecretStr("")
    AWS_REGION: str = ""
    AWS_S3_BUCKET: str = ""
    IMAGE_PREFIX: str = "food/"

    # Recipe inference
    GEMINI_API_KEY: SecretStr = SecretStr("")
    GEMINI_MODEL: str = "gemini-2.5-flash"
    IMAGE_FETCH_TIMEOUT_SECONDS: float = 30.0
    INFERENCE_CONCURRENCY: int = Field(default=8, ge=1)
    GALLERY_ALL_OR_NOTHING: bool = True

    FRONTEND_CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"],
    )


settings = Settings()
