"""Document Store Port Interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator

from ..domain import Document


class DocumentStorePort(ABC):
    """Abstract interface for the registry of knowledge base documents."""

    @abstractmethod
    def load_all(self) -> None:
        """Load every supported document from persistent storage."""
        ...

    @abstractmethod
    def add(self, filename: str, content: str) -> Document: ...

    @abstractmethod
    def delete(self, filename: str) -> Document: ...

    @abstractmethod
    def list(self) -> list[Document]: ...

    @abstractmethod
    def get(self, filename: str) -> Document | None: ...

    def iter_chunks(self) -> Iterator[tuple[Document, int, str, str]]:
        """Yield ``(document, index, chunk_id, text)`` in document then chunk order."""
        for document in self.list():
            for index, (chunk_id, text) in enumerate(zip(document.chunk_ids(), document.chunks)):
                yield document, index, chunk_id, text

    def total_chunks(self) -> int:
        return sum(len(document.chunks) for document in self.list())
