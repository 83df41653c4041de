"""
Application Configuration
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 4000

    # OpenAI
    API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-3.5-turbo"

    # Black Forest Labs image generation
    BFL_API_KEY: Optional[str] = None
    BFL_BASE_URL: str = "https://api.bfl.ml/v1"
    IMAGE_POLL_INTERVAL: float = 0.5
    IMAGE_POLL_MAX_ATTEMPTS: int = 120
    IMAGE_HTTP_TIMEOUT: float = 30.0

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True
