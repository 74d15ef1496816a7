"""
Application configuration settings with production-ready defaults.
"""
from pydantic_settings import BaseSettings
from pydantic import Field, AnyHttpUrl
from pathlib import Path
from typing import List, Optional, Union
from functools import lru_cache

DEFAULT_INGREDIENT_DATA = Path(__file__).resolve().parent.parent / "data" / "ingredients.json"


class Settings(BaseSettings):
    # Application settings
    APP_NAME: str = Field("Skin Advisor API", description="Name of the application")
    DEBUG: bool = Field(False, description="Enable debug mode (disable in production!)")
    ENVIRONMENT: str = Field("production", description="Runtime environment (e.g., development, staging, production)")

    # Server settings
    HOST: str = Field("0.0.0.0", description="Host to bind the server to")
    PORT: int = Field(8000, description="Port to run the server on")

    API_PREFIX: str = Field("/api", description="API prefix for all routes")
    BACKEND_CORS_ORIGINS: List[Union[str, AnyHttpUrl]] = Field(
        ["*"],
        description="List of origins allowed to make cross-origin requests"
    )

    # Logging
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LOG_FILE: Optional[str] = Field("app.log", description="Log file path, empty to log to stderr only")

    # Upload settings
    MAX_UPLOAD_SIZE: int = Field(
        5 * 1024 * 1024,  # 5MB
        description="Maximum image upload size in bytes"
    )

    # Ingredient dataset
    INGREDIENT_DATA_PATH: Path = Field(
        default_factory=lambda: DEFAULT_INGREDIENT_DATA,
        description="JSON file with the static ingredient dataset"
    )

    # Gemini API settings
    GEMINI_API_KEY: str = Field(
        "",
        description="Google Gemini API key for routine generation"
    )
    GEMINI_MODEL: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use for routine generation"
    )
    GEMINI_TEMPERATURE: float = Field(0.7, description="Sampling temperature for routine generation")
    GEMINI_MAX_OUTPUT_TOKENS: int = Field(1024, description="Maximum tokens in a generated routine")

    # Cosmily ingredient analysis relay
    COSMILY_API_URL: str = Field(
        "https://api.cosmily.com/api/v1/analyze/ingredient_list",
        description="Upstream ingredient list analysis endpoint"
    )
    COSMILY_ACCESS_TOKEN: str = Field("", description="Bearer token for the Cosmily API")
    COSMILY_TIMEOUT: float = Field(10.0, description="Upstream request timeout in seconds")

    # Streaming
    TYPING_DELAY_MS: int = Field(25, description="Delay between revealed characters in streamed routines")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env file


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings, cached for performance.
    """
    return Settings()


settings = get_settings()
