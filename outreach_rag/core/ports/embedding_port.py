"""Embedding Port Interface."""

from abc import ABC, abstractmethod


class EmbeddingPort(ABC):
    """Abstract interface for embedding providers."""

    model_name: str = ""

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Return the embedding vector for ``text``.

        Raises:
            EmbeddingServiceError: If the provider call fails or returns no vector.
        """
        ...
