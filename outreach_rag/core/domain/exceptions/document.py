"""Document lifecycle exceptions for the Outreach RAG engine."""

from .base import OutreachRAGError


class DocumentError(OutreachRAGError):
    """Base error for knowledge base document operations."""

    error_code = "RAG_DOC_001"


class DuplicateDocumentError(DocumentError):
    """A document with the same filename is already registered."""

    error_code = "RAG_DOC_002"


class DocumentNotFoundError(DocumentError):
    """Requested document is not registered."""

    error_code = "RAG_DOC_003"


NotFoundError = DocumentNotFoundError
