"""Domain models for the Outreach RAG engine.

- document: Document, SearchResult, KnowledgeStats and OperationResult
- utils: sentence chunking and cosine similarity
- exceptions: the structured error hierarchy

Models are re-exported here for convenient importing:

    from outreach_rag.core.domain import Document, SearchResult
"""

from .document import (
    Document,
    DocumentSummary,
    KnowledgeStats,
    OperationResult,
    SearchResult,
    make_chunk_id,
)

__all__ = [
    "Document",
    "DocumentSummary",
    "KnowledgeStats",
    "OperationResult",
    "SearchResult",
    "make_chunk_id",
]
