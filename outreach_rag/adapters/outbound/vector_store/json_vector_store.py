"""JSON-file vector store.

The persisted format is a JSON array of ``[chunk_id, vector]`` pairs. The
file is a cache of embeddings that can always be regenerated from the
documents directory, so a missing or corrupt file starts an empty store
instead of failing startup.
"""

import json
import logging
import os
import tempfile
import threading
from collections.abc import Iterable
from pathlib import Path

from ....core.domain.exceptions import StorageCorruptionError, VectorStoreError
from ....core.ports.vector_store_port import VectorStorePort

logger = logging.getLogger(__name__)


class JsonVectorStore(VectorStorePort):
    """In-memory chunk id -> vector map persisted to a single JSON file."""

    def __init__(self, path: Path) -> None:
        """Initialize the store.

        Args:
            path: Location of the JSON vector file.
        """
        self.path = Path(path)
        self._vectors: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def load(self) -> None:
        """Rehydrate from disk; missing or corrupt files yield an empty store."""
        if not self.path.exists():
            logger.info("Vector file %s not found, starting with an empty store", self.path)
            with self._lock:
                self._vectors = {}
            return

        try:
            vectors = self._parse(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, StorageCorruptionError) as e:
            error = (
                e
                if isinstance(e, StorageCorruptionError)
                else StorageCorruptionError(
                    "Vector file is unreadable", cause=e, context={"path": str(self.path)}
                )
            )
            logger.warning(
                "%s (%s); starting with an empty store, embeddings will be regenerated",
                error.message,
                error.error_code,
            )
            vectors = {}

        with self._lock:
            self._vectors = vectors
        logger.info("Loaded %d vectors from %s", len(vectors), self.path)

    def _parse(self, raw: str) -> dict[str, list[float]]:
        try:
            pairs = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageCorruptionError(
                "Vector file is not valid JSON", cause=e, context={"path": str(self.path)}
            ) from e

        if not isinstance(pairs, list):
            raise StorageCorruptionError(
                "Vector file must hold a JSON array", context={"path": str(self.path)}
            )

        vectors: dict[str, list[float]] = {}
        for entry in pairs:
            if (
                not isinstance(entry, list)
                or len(entry) != 2
                or not isinstance(entry[0], str)
                or not isinstance(entry[1], list)
            ):
                raise StorageCorruptionError(
                    "Vector file entries must be [chunk_id, vector] pairs",
                    context={"path": str(self.path)},
                )
            try:
                vectors[entry[0]] = [float(x) for x in entry[1]]
            except (TypeError, ValueError) as e:
                raise StorageCorruptionError(
                    "Vector holds non-numeric values",
                    cause=e,
                    context={"path": str(self.path), "chunk_id": entry[0]},
                ) from e
        return vectors

    def save(self) -> None:
        """Atomically write the full map (temp file + rename).

        Raises:
            VectorStoreError: If the file cannot be written. The previously
                saved file is left untouched.
        """
        with self._lock:
            payload = json.dumps(
                [[chunk_id, vector] for chunk_id, vector in self._vectors.items()],
                ensure_ascii=False,
            )
            count = len(self._vectors)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, self.path)
            except OSError as e:
                Path(tmp_name).unlink(missing_ok=True)
                raise VectorStoreError(
                    "Failed to save vector store", cause=e, context={"path": str(self.path)}
                ) from e

        logger.debug("Saved %d vectors to %s", count, self.path)

    def get(self, chunk_id: str) -> list[float] | None:
        with self._lock:
            return self._vectors.get(chunk_id)

    def set(self, chunk_id: str, vector: list[float]) -> None:
        with self._lock:
            self._vectors[chunk_id] = list(vector)

    def delete(self, chunk_id: str) -> None:
        with self._lock:
            self._vectors.pop(chunk_id, None)

    def size(self) -> int:
        with self._lock:
            return len(self._vectors)

    def keys(self) -> Iterable[str]:
        with self._lock:
            return list(self._vectors)

    def __contains__(self, chunk_id: object) -> bool:
        with self._lock:
            return chunk_id in self._vectors

    def __len__(self) -> int:
        return self.size()
