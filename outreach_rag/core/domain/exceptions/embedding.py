"""Embedding service exceptions for the Outreach RAG engine."""

from .base import OutreachRAGError


class EmbeddingServiceError(OutreachRAGError):
    """The remote embedding call failed.

    Common causes:
    - Network or DNS failure
    - Invalid credentials
    - Quota exhausted on the provider side
    """

    error_code = "RAG_EMB_001"


class EmbeddingRateLimitError(EmbeddingServiceError):
    """Embedding API rate limit exceeded (HTTP 429)."""

    error_code = "RAG_EMB_002"


class MalformedEmbeddingResponseError(EmbeddingServiceError):
    """Embedding API answered but the payload holds no usable vector."""

    error_code = "RAG_EMB_003"
