# Defines application-wide settings using pydantic-settings' BaseSettings
# Manages environment variables for various aspects of the application:
# API configuration (prefix, project name)
# Security settings (secret key, JWT algorithm)
# Database connection details
# Media storage (local uploads directory, Cloudflare R2)
# Feed limits (page size, caption/comment lengths)


import json
from typing import Annotated, List, Union

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

load_dotenv()


def _split_list(v: Union[str, List[str]]) -> List[str]:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, str):
        # Handle JSON string format
        try:
            return json.loads(v)
        except ValueError:
            return []
    return v


class Settings(BaseSettings):
    # API configuration
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "Snapfeed API"
    VERSION: str = "0.1.0"

    # Server URLs
    BASE_URL: str = "http://localhost:8000"

    # Security
    SECRET_KEY: str = "development_secret_key"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days
    ALGORITHM: str = "HS256"

    # Database
    DATABASE_URL: str = "sqlite:///./snapfeed.db"

    # CORS
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # File uploads
    UPLOAD_DIRECTORY: str = "uploads"
    MAX_UPLOAD_SIZE: int = 2 * 1024 * 1024  # 2 MB
    ALLOWED_MEDIA_TYPES: Annotated[List[str], NoDecode] = ["image/jpeg", "image/png", "image/webp"]

    # Cloudflare R2 Storage
    R2_ENDPOINT: str = ""
    R2_ACCESS_KEY_ID: str = ""
    R2_SECRET_ACCESS_KEY: str = ""
    R2_BUCKET_NAME: str = "snapfeed-media"
    R2_PUBLIC_URL: str = ""

    # Feed
    POSTS_PER_PAGE: int = 10
    POST_COMMENTS_LIMIT: int = 50
    MAX_CAPTION_LENGTH: int = 1000
    MAX_COMMENT_LENGTH: int = 1000
    ALLOW_ANONYMOUS_READS: bool = False

    # Development settings - set these differently in production
    DEBUG: bool = False
    ENVIRONMENT: str = "production"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        return _split_list(v)

    @field_validator("ALLOWED_MEDIA_TYPES", mode="before")
    @classmethod
    def assemble_media_types(cls, v: Union[str, List[str]]) -> List[str]:
        return _split_list(v)

    @field_validator("R2_PUBLIC_URL", "BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


# Create settings instance
settings = Settings()
