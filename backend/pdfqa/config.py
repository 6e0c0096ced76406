"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Chunking (characters)
    chunk_size: int = 1000
    chunk_overlap: int = 200

    # Retrieval
    top_k: int = 5

    # Uploads
    max_upload_bytes: int = 20 * 1024 * 1024

    # OpenAI credentials
    openai_api_key: SecretStr | None = None

    # Embeddings
    openai_embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536

    # Answer generation
    openai_chat_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.1
    llm_max_tokens: int = 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
