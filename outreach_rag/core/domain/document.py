"""Document, search result and statistics models for the knowledge engine."""

from dataclasses import asdict, dataclass, field
from typing import Any


def make_chunk_id(filename: str, index: int) -> str:
    """Build the composite key joining a chunk to its stored vector."""
    return f"{filename}_{index}"


@dataclass
class Document:
    """A knowledge base document and the chunks derived from it.

    The filename is both the identity and the display name. Content is
    immutable once chunked; re-chunking requires delete and re-add.

    Attributes:
        filename: Unique document name (e.g. ``ablation_faq.md``).
        content: Raw text content.
        chunks: Ordered chunk texts derived from ``content``.
    """

    filename: str
    content: str
    chunks: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.filename

    @property
    def size(self) -> int:
        """Content length in characters."""
        return len(self.content)

    def chunk_ids(self) -> list[str]:
        return [make_chunk_id(self.filename, i) for i in range(len(self.chunks))]


@dataclass
class SearchResult:
    """A ranked chunk returned by semantic search.

    Attributes:
        document: Name of the source document.
        content: Chunk text.
        score: Cosine similarity between the query and the chunk.
    """

    document: str
    content: str
    score: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DocumentSummary:
    """Per-document entry of the knowledge base statistics."""

    name: str
    size: int
    chunks: int


@dataclass
class KnowledgeStats:
    """Snapshot of knowledge base size and embedding coverage."""

    total_documents: int
    total_chunks: int
    total_vectors: int
    vector_coverage: str
    coverage_percent: float
    documents: list[DocumentSummary] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class OperationResult:
    """Outcome of a document add/delete, safe to hand to the frontend.

    Attributes:
        success: Whether the document operation took effect.
        error: Human-readable failure message.
        code: Error code of the failure (e.g. ``RAG_DOC_002``).
        chunks: Number of chunks of the affected document.
        vectors: Vectors written (add) or removed (delete).
    """

    success: bool
    error: str | None = None
    code: str | None = None
    chunks: int | None = None
    vectors: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
