"""Validation exceptions for the Outreach RAG engine."""

from .base import OutreachRAGError


class ValidationError(OutreachRAGError):
    """Input validation failed."""

    error_code = "RAG_VAL_001"


class EmptyQueryError(ValidationError):
    """Query cannot be empty or whitespace only."""

    error_code = "RAG_VAL_002"


class InvalidDocumentNameError(ValidationError):
    """Document filename is unsafe or not a supported document type."""

    error_code = "RAG_VAL_003"
