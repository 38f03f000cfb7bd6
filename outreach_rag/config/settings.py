"""Configuration management for the Outreach RAG engine."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.domain.utils import SENTENCE_TERMINATORS


def _sanitize_secret(value: str) -> str:
    """Remove BOM characters and whitespace from secrets.

    Secrets pasted into .env files or injected by the deployment platform
    may carry BOM characters that break HTTP headers.
    """
    if not value:
        return value
    return value.lstrip("\ufeff").strip()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Embedding service (OpenAI-compatible /embeddings endpoint)
    embedding_api_key: str = ""
    embedding_model: str = ""
    embedding_api_base: str = ""
    embedding_timeout_seconds: float = 30.0
    embedding_requests_per_minute: int | None = None

    @field_validator("embedding_api_key", "embedding_model", "embedding_api_base", mode="after")
    @classmethod
    def sanitize_secrets(cls, value: str) -> str:
        """Remove BOM and whitespace from credential values."""
        return _sanitize_secret(value)

    # Knowledge base storage
    documents_dir: Path = Path("./knowledge_base")
    vector_store_path: Path | None = None

    # Chunking
    max_chunk_size: int = Field(default=500, gt=0)
    sentence_terminators: str = SENTENCE_TERMINATORS

    # Retrieval
    min_similarity: float = 0.1
    default_top_k: int = Field(default=3, gt=0)

    # Embedding maintenance
    backfill_batch_size: int = Field(default=10, gt=0)
    backfill_delay_seconds: float = Field(default=0.5, ge=0)
    backfill_on_startup: bool = True

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def vectors_file(self) -> Path:
        """JSON file holding the serialized vector map."""
        return self.vector_store_path or self.documents_dir / "vectors.json"

    def ensure_directories(self) -> None:
        """Create all required directories if they don't exist."""
        self.documents_dir.mkdir(parents=True, exist_ok=True)
        self.vectors_file.parent.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
