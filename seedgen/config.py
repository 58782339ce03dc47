"""
Seedgen Service Configuration
"""

from typing import List, Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ===== Service =====
    SERVICE_NAME: str = Field(default="seedgen-service")
    SERVICE_VERSION: str = Field(default="1.0.0")
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)
    LOG_LEVEL: str = Field(default="info")
    DEBUG: bool = Field(default=False)

    # ===== CORS =====
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"]
    )

    # ===== Corpus =====
    # Optional text file loaded into the corpus store at boot
    CORPUS_PATH: Optional[str] = Field(default=None)
    CORPUS_CHUNK_SIZE: int = Field(default=80000, ge=1)
    CORPUS_MAX_TOKEN_LEN: int = Field(default=10, ge=1)
    SEED_MAX_TOKEN_LEN: int = Field(default=3, ge=1)
    # Chunks tokenized between two yields to the event loop
    TOKENIZE_BATCH_CHUNKS: int = Field(default=4, ge=1)

    # ===== Generation Defaults =====
    DEFAULT_WINDOW: int = Field(default=50)
    DEFAULT_POWER: float = Field(default=4.0)
    DEFAULT_THRESHOLD: float = Field(default=1e-7)
    DEFAULT_NGRAM: int = Field(default=2)
    DEFAULT_GEN_LENGTH: int = Field(default=200)
    DEFAULT_MAX_EXTEND: int = Field(default=150)
    DEFAULT_DELAY: float = Field(default=0.0)

    # ===== Sampling =====
    DEFAULT_WEIGHTED: bool = Field(default=True)
    DEFAULT_TARGET_BOOST: float = Field(default=4.0)
    DEFAULT_FEATURE_BOOST: float = Field(default=5.0)
    DEFAULT_FEATURE_STRATEGY: Literal["global", "local"] = Field(default="global")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
