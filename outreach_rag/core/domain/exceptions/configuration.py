"""Configuration-related exceptions for the Outreach RAG engine."""

from .base import OutreachRAGError


class ConfigurationError(OutreachRAGError):
    """Configuration or environment variable errors.

    Raised at construction time when required settings are missing or
    invalid. Never retried.
    """

    error_code = "RAG_CFG_001"


class MissingAPIKeyError(ConfigurationError):
    """Required API key is not configured."""

    error_code = "RAG_CFG_002"
