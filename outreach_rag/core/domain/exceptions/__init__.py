"""Custom exception hierarchy for the Outreach RAG engine.

Each exception includes an error code, the location it was raised from,
optional cause chaining and JSON serialization. Import from this package
directly:

    from outreach_rag.core.domain.exceptions import EmbeddingServiceError
"""

# Base classes
from .base import ExceptionContext, OutreachRAGError

# Configuration exceptions
from .configuration import ConfigurationError, MissingAPIKeyError

# Document lifecycle exceptions
from .document import (
    DocumentError,
    DocumentNotFoundError,
    DuplicateDocumentError,
    NotFoundError,
)

# Embedding exceptions
from .embedding import (
    EmbeddingRateLimitError,
    EmbeddingServiceError,
    MalformedEmbeddingResponseError,
)

# Validation exceptions
from .validation import EmptyQueryError, InvalidDocumentNameError, ValidationError

# Vector store exceptions
from .vector_store import StorageCorruptionError, VectorStoreError

__all__ = [
    # Base
    "ExceptionContext",
    "OutreachRAGError",
    # Configuration
    "ConfigurationError",
    "MissingAPIKeyError",
    # Documents
    "DocumentError",
    "DuplicateDocumentError",
    "DocumentNotFoundError",
    "NotFoundError",
    # Embedding
    "EmbeddingServiceError",
    "EmbeddingRateLimitError",
    "MalformedEmbeddingResponseError",
    # Vector Store
    "VectorStoreError",
    "StorageCorruptionError",
    # Validation
    "ValidationError",
    "EmptyQueryError",
    "InvalidDocumentNameError",
]
