"""Pydantic models for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field


class SearchRequest(BaseModel):
    """Request model for semantic search."""

    query: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="Free-text query to match against the knowledge base",
        json_schema_extra={"example": "post-surgical fever after ablation"},
    )
    top_k: int = Field(default=3, ge=1, le=50, description="Maximum number of results")


class SearchResultItem(BaseModel):
    """A ranked knowledge base chunk."""

    document: str = Field(..., description="Source document filename")
    content: str = Field(..., description="Chunk text")
    score: float = Field(..., ge=-1, le=1, description="Cosine similarity to the query")


class SearchResponse(BaseModel):
    """Response model for semantic search."""

    query: str
    results: list[SearchResultItem] = Field(default_factory=list)


class ContextRequest(BaseModel):
    """Request model for a prompt context summary."""

    query: str = Field(..., min_length=1, max_length=20000)


class ContextResponse(BaseModel):
    """Source-labelled context block for LLM prompt construction."""

    summary: str


class UploadRequest(BaseModel):
    """Request model for adding a document."""

    filename: str = Field(
        ..., min_length=1, max_length=255, json_schema_extra={"example": "faq.md"}
    )
    content: str = Field(..., description="Plain text or markdown content")


class OperationResponse(BaseModel):
    """Outcome of a document add or delete."""

    success: bool
    error: str | None = None
    code: str | None = None
    chunks: int | None = None
    vectors: int | None = None


class DocumentInfo(BaseModel):
    """Per-document statistics."""

    name: str
    size: int
    chunks: int


class StatsResponse(BaseModel):
    """Knowledge base size and embedding coverage."""

    total_documents: int
    total_chunks: int
    total_vectors: int
    vector_coverage: str = Field(..., description="Coverage as a percentage string, e.g. 75.0%")
    coverage_percent: float
    documents: list[DocumentInfo] = Field(default_factory=list)


class ConfigResponse(BaseModel):
    """Embedding configuration summary."""

    embedding_model: str
    vector_store_size: int
    documents_count: int
    total_chunks: int
    vector_coverage: str


class RegenerateResponse(BaseModel):
    """Response for the background backfill trigger."""

    success: bool
    message: str
    model: str


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")
    rag_engine: str = Field(..., description="ready or not initialized")


class ErrorDetail(BaseModel):
    """Structured error detail information."""

    type: str = Field(..., description="Exception type name")
    code: str = Field(..., description="Error code (e.g., RAG_EMB_001)")
    message: str = Field(..., description="Human-readable error message")


class ErrorLocation(BaseModel):
    """Source location where error occurred."""

    model_config = ConfigDict(populate_by_name=True)

    class_name: str = Field(..., alias="class", description="Class name or <module>")
    method: str = Field(..., description="Method/function name")
    file: str = Field(..., description="Source file name")
    line: int = Field(..., description="Line number")
    timestamp: str | None = Field(None, description="When the error occurred")


class ErrorResponse(BaseModel):
    """Response model for structured errors.

    Example:
        {
            "error": {"type": "EmbeddingServiceError", "code": "RAG_EMB_001", "message": "..."},
            "location": {"class": "HttpEmbeddingAdapter", "method": "embed", ...},
            "context": {"model": "text-embedding-3-small"}
        }
    """

    error: ErrorDetail
    location: ErrorLocation | None = None
    context: dict | None = None
    cause: dict | None = None
    stack_trace: list[str] | None = None
