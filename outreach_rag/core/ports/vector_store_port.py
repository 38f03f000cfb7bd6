"""Vector Store Port Interface."""

from abc import ABC, abstractmethod
from collections.abc import Iterable


class VectorStorePort(ABC):
    """Abstract interface for the chunk id -> embedding map."""

    @abstractmethod
    def load(self) -> None:
        """Rehydrate the in-memory map from persistent storage."""
        ...

    @abstractmethod
    def save(self) -> None:
        """Persist the full in-memory map."""
        ...

    @abstractmethod
    def get(self, chunk_id: str) -> list[float] | None: ...

    @abstractmethod
    def set(self, chunk_id: str, vector: list[float]) -> None: ...

    @abstractmethod
    def delete(self, chunk_id: str) -> None: ...

    @abstractmethod
    def size(self) -> int: ...

    @abstractmethod
    def keys(self) -> Iterable[str]: ...

    def __contains__(self, chunk_id: object) -> bool:
        return isinstance(chunk_id, str) and self.get(chunk_id) is not None
