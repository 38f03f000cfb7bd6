"""Vector store exceptions for the Outreach RAG engine."""

from .base import OutreachRAGError


class VectorStoreError(OutreachRAGError):
    """Base error for vector store operations."""

    error_code = "RAG_VEC_001"


class StorageCorruptionError(VectorStoreError):
    """Persisted vector file is unreadable or has an unexpected shape.

    Recovered locally: the store starts empty and embeddings are
    regenerated from the source documents.
    """

    error_code = "RAG_VEC_002"
