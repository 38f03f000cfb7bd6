"""HTTP adapter for OpenAI-compatible embedding endpoints.

Calls ``POST {base_url}/embeddings`` with ``{"model", "input"}`` and reads
``data[0].embedding`` from the response. Failures are raised, never
replaced with placeholder vectors, since a zero vector would silently
corrupt similarity rankings.
"""

import logging
import numbers

import requests

from ....common.rate_limiter import RateLimiter
from ....core.domain.exceptions import (
    ConfigurationError,
    EmbeddingRateLimitError,
    EmbeddingServiceError,
    MalformedEmbeddingResponseError,
    MissingAPIKeyError,
)
from ....core.ports.embedding_port import EmbeddingPort

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class HttpEmbeddingAdapter(EmbeddingPort):
    """Embedding provider backed by a bearer-authenticated REST API.

    No retries happen here; search and backfill apply their own tolerance.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        rate_limiter: RateLimiter | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            api_key: Bearer credential for the embedding service.
            model_name: Embedding model identifier.
            base_url: API base URL, e.g. ``https://api.example.com/v1``.
            timeout: Per-request timeout in seconds.
            rate_limiter: Optional throttle shared by all embedding calls.
            session: Optional requests session (connection pooling, tests).

        Raises:
            MissingAPIKeyError: If no API key is configured.
            ConfigurationError: If the model or base URL is missing.
        """
        if not api_key:
            raise MissingAPIKeyError(
                "Embedding API key not set. Set EMBEDDING_API_KEY in your .env file."
            )
        missing = [
            name
            for name, value in (("EMBEDDING_MODEL", model_name), ("EMBEDDING_API_BASE", base_url))
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required embedding configuration: {', '.join(missing)}",
                context={"missing": missing},
            )

        self.api_key = api_key
        self.model_name = model_name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._rate_limiter = rate_limiter or RateLimiter(None)
        self._session = session

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/embeddings"

    def embed(self, text: str) -> list[float]:
        """Generate the embedding vector for a single text.

        Args:
            text: Text to embed.

        Returns:
            Embedding vector as a list of floats.

        Raises:
            EmbeddingRateLimitError: If the provider answers HTTP 429.
            MalformedEmbeddingResponseError: If the response holds no vector.
            EmbeddingServiceError: For network and other HTTP failures.
        """
        self._rate_limiter.acquire()

        post = self._session.post if self._session is not None else requests.post
        context = {"model": self.model_name, "endpoint": self.endpoint}
        try:
            response = post(
                self.endpoint,
                json={"model": self.model_name, "input": text},
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise EmbeddingServiceError(
                f"Embedding request failed: {e}", cause=e, context=context
            ) from e

        if response.status_code == 429:
            raise EmbeddingRateLimitError(
                "Embedding API rate limit exceeded",
                context={**context, "status_code": 429},
            )
        if not 200 <= response.status_code < 300:
            logger.warning(
                "Embedding API error %s: %s", response.status_code, response.text[:500]
            )
            raise EmbeddingServiceError(
                f"Embedding API returned HTTP {response.status_code}",
                context={**context, "status_code": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedEmbeddingResponseError(
                "Embedding API returned invalid JSON", cause=e, context=context
            ) from e

        return self._extract_vector(data, context)

    @staticmethod
    def _extract_vector(data: object, context: dict) -> list[float]:
        try:
            embedding = data["data"][0]["embedding"]  # type: ignore[index]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedEmbeddingResponseError(
                "Embedding API response is missing data[0].embedding", cause=e, context=context
            ) from e

        if (
            not isinstance(embedding, list)
            or not embedding
            or not all(
                isinstance(x, numbers.Real) and not isinstance(x, bool) for x in embedding
            )
        ):
            raise MalformedEmbeddingResponseError(
                "Embedding API returned an empty or non-numeric vector", context=context
            )

        return [float(x) for x in embedding]
