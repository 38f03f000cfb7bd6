"""Unit tests for exception handling system.

Tests both the exception hierarchy and the exception handler utilities.
"""

import json

import pytest

from outreach_rag.adapters.common.exception_handler import (
    format_exception_json,
    get_error_code,
    get_http_status_code,
    get_status_for_error_code,
)
from outreach_rag.core.domain.exceptions import (
    ConfigurationError,
    DocumentError,
    DocumentNotFoundError,
    DuplicateDocumentError,
    EmbeddingRateLimitError,
    EmbeddingServiceError,
    EmptyQueryError,
    InvalidDocumentNameError,
    MalformedEmbeddingResponseError,
    MissingAPIKeyError,
    NotFoundError,
    OutreachRAGError,
    StorageCorruptionError,
    ValidationError,
    VectorStoreError,
)

# Apply @pytest.mark.unit to all tests in this module
pytestmark = pytest.mark.unit


class TestExceptionHierarchy:
    """Tests for the exception class hierarchy."""

    def test_outreach_rag_error_is_base(self):
        """OutreachRAGError should be the base for all custom exceptions."""
        for exc_type in (
            ConfigurationError,
            DocumentError,
            EmbeddingServiceError,
            ValidationError,
            VectorStoreError,
        ):
            assert issubclass(exc_type, OutreachRAGError)

    def test_embedding_errors_inherit_from_service_error(self):
        assert issubclass(EmbeddingRateLimitError, EmbeddingServiceError)
        assert issubclass(MalformedEmbeddingResponseError, EmbeddingServiceError)

    def test_document_errors(self):
        assert issubclass(DuplicateDocumentError, DocumentError)
        assert NotFoundError is DocumentNotFoundError

    def test_validation_errors(self):
        assert issubclass(EmptyQueryError, ValidationError)
        assert issubclass(InvalidDocumentNameError, ValidationError)

    def test_storage_corruption_is_vector_store_error(self):
        assert issubclass(StorageCorruptionError, VectorStoreError)

    def test_config_errors_inherit_from_configuration(self):
        assert issubclass(MissingAPIKeyError, ConfigurationError)


class TestErrorCodes:
    """Each exception class carries a unique error code."""

    def test_codes_are_unique(self):
        classes = [
            OutreachRAGError,
            ConfigurationError,
            MissingAPIKeyError,
            EmbeddingServiceError,
            EmbeddingRateLimitError,
            MalformedEmbeddingResponseError,
            DocumentError,
            DuplicateDocumentError,
            DocumentNotFoundError,
            VectorStoreError,
            StorageCorruptionError,
            ValidationError,
            EmptyQueryError,
            InvalidDocumentNameError,
        ]
        codes = [cls.error_code for cls in classes]
        assert len(codes) == len(set(codes))
        assert all(code.startswith("RAG_") for code in codes)

    def test_specific_codes(self):
        assert EmbeddingRateLimitError.error_code == "RAG_EMB_002"
        assert DocumentNotFoundError.error_code == "RAG_DOC_003"
        assert EmptyQueryError.error_code == "RAG_VAL_002"


class TestExceptionContext:
    """Tests for location capture and serialization."""

    def test_captures_raise_location(self):
        def raise_it():
            raise DuplicateDocumentError("exists", context={"filename": "faq.md"})

        with pytest.raises(DuplicateDocumentError) as exc_info:
            raise_it()

        location = exc_info.value.location
        assert location.method_name == "raise_it"
        assert location.file_name == "test_exceptions.py"

    def test_to_dict(self):
        cause = TimeoutError("read timed out")
        exc = EmbeddingServiceError("Embedding failed", cause=cause, context={"model": "m"})

        data = exc.to_dict()

        assert data["error"] == {
            "type": "EmbeddingServiceError",
            "code": "RAG_EMB_001",
            "message": "Embedding failed",
        }
        assert data["context"] == {"model": "m"}
        assert data["cause"] == {"type": "TimeoutError", "message": "read timed out"}
        assert "stack_trace" not in data

    def test_to_dict_is_json_serializable(self):
        exc = ValidationError("bad input", context={"field": "query"})
        json.dumps(exc.to_dict(include_trace=True))


class TestExceptionHandler:
    """Tests for handler utilities."""

    def test_format_standard_exception(self):
        try:
            raise KeyError("missing")
        except KeyError as e:
            data = format_exception_json(e, extra_context={"path": "/api"})

        assert data["error"]["type"] == "KeyError"
        assert data["error"]["code"] == "PYTHON_ERR"
        assert data["context"] == {"path": "/api"}

    def test_get_error_code(self):
        assert get_error_code(EmptyQueryError("empty")) == "RAG_VAL_002"
        assert get_error_code(RuntimeError("x")) == "PYTHON_ERR"

    @pytest.mark.parametrize(
        ("exc", "status"),
        [
            (EmptyQueryError("empty"), 400),
            (InvalidDocumentNameError("bad"), 400),
            (DocumentNotFoundError("gone"), 404),
            (DuplicateDocumentError("dup"), 409),
            (EmbeddingRateLimitError("slow down"), 429),
            (EmbeddingServiceError("down"), 503),
            (MalformedEmbeddingResponseError("garbage"), 503),
            (VectorStoreError("disk"), 503),
            (MissingAPIKeyError("key"), 500),
            (OutreachRAGError("generic"), 500),
            (ValueError("bad"), 400),
            (ConnectionError("refused"), 503),
            (RuntimeError("boom"), 500),
        ],
    )
    def test_http_status_mapping(self, exc, status):
        assert get_http_status_code(exc) == status

    def test_status_for_operation_result_codes(self):
        assert get_status_for_error_code("RAG_DOC_003") == 404
        assert get_status_for_error_code("RAG_DOC_002") == 409
        assert get_status_for_error_code("RAG_VAL_003") == 400
        assert get_status_for_error_code(None) == 400
