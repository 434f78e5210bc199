# Defines application-wide settings using pydantic-settings' BaseSettings
# Values come from environment variables or a local .env file:
# API configuration (project name, route prefix)
# Security settings (secret key, JWT algorithm, bcrypt cost)
# Database connection details
# Upload storage location and limits


import json
from functools import lru_cache
from typing import Annotated, List, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    # API configuration
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "InstaLike API"
    VERSION: str = "0.1.0"

    # Security
    SECRET_KEY: str = "development_secret_key"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days
    PASSWORD_HASH_ROUNDS: int = 10

    # Database
    DATABASE_URL: str = "sqlite:///./db.sqlite3"

    # CORS
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = [
        "http://localhost:5173",  # Vite dev server
        "http://localhost:3000",
    ]

    # File uploads
    UPLOAD_DIRECTORY: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5 MB
    ALLOWED_IMAGE_EXTENSIONS: Annotated[List[str], NoDecode] = [".jpg", ".jpeg", ".png", ".gif"]

    DEBUG: bool = False
    ENVIRONMENT: str = "production"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @field_validator("BACKEND_CORS_ORIGINS", "ALLOWED_IMAGE_EXTENSIONS", mode="before")
    @classmethod
    def assemble_list(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            # Handle JSON string format
            return json.loads(v)
        return v

    @field_validator("ALLOWED_IMAGE_EXTENSIONS")
    @classmethod
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]

    @field_validator("UPLOAD_URL_PREFIX")
    @classmethod
    def normalize_url_prefix(cls, v: str) -> str:
        return "/" + v.strip("/")


@lru_cache
def get_settings() -> Settings:
    """Settings read from the process environment, built once."""
    return Settings()
