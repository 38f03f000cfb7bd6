"""Filesystem-backed registry of knowledge base documents."""

from __future__ import annotations

import logging
from pathlib import Path

from ....common.utils import clean_text
from ....core.domain import Document
from ....core.domain.exceptions import (
    DocumentNotFoundError,
    DuplicateDocumentError,
    InvalidDocumentNameError,
)
from ....core.domain.utils import SENTENCE_TERMINATORS, chunk_text
from ....core.ports.document_store_port import DocumentStorePort

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".txt", ".md")


class FileDocumentStore(DocumentStorePort):
    """Documents stored as plain files named by their filename.

    The directory is the ultimate source of truth for the knowledge base;
    the in-memory registry mirrors it in load order.
    """

    def __init__(
        self,
        directory: Path,
        max_chunk_size: int = 500,
        terminators: str = SENTENCE_TERMINATORS,
    ) -> None:
        """Initialize the store.

        Args:
            directory: Documents directory.
            max_chunk_size: Maximum chunk length passed to the chunker.
            terminators: Sentence terminators passed to the chunker.
        """
        self.directory = Path(directory)
        self.max_chunk_size = max_chunk_size
        self.terminators = terminators
        self._documents: dict[str, Document] = {}

    def _chunk(self, content: str) -> list[str]:
        return chunk_text(content, self.max_chunk_size, self.terminators)

    @staticmethod
    def validate_filename(filename: str) -> str:
        """Reject names that are empty, escape the directory, or are unsupported.

        Raises:
            InvalidDocumentNameError: If the filename is not acceptable.
        """
        name = (filename or "").strip()
        if not name:
            raise InvalidDocumentNameError("Filename cannot be empty")
        if "/" in name or "\\" in name or name in (".", "..") or name.startswith("."):
            raise InvalidDocumentNameError(
                "Filename must be a plain file name", context={"filename": name}
            )
        if not name.lower().endswith(SUPPORTED_EXTENSIONS):
            raise InvalidDocumentNameError(
                f"Unsupported document type, expected one of {', '.join(SUPPORTED_EXTENSIONS)}",
                context={"filename": name},
            )
        return name

    def load_all(self) -> None:
        """Scan the directory and register every readable .txt/.md file.

        Files that cannot be read or decoded are logged and skipped.
        """
        self.directory.mkdir(parents=True, exist_ok=True)
        self._documents = {}

        for path in sorted(self.directory.iterdir()):
            if not path.is_file() or path.suffix.lower() not in SUPPORTED_EXTENSIONS:
                continue
            try:
                content = clean_text(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping unreadable document %s: %s", path.name, e)
                continue

            self._documents[path.name] = Document(
                filename=path.name, content=content, chunks=self._chunk(content)
            )

        logger.info("Loaded %d documents from %s", len(self._documents), self.directory)

    def add(self, filename: str, content: str) -> Document:
        """Persist and register a new document.

        Raises:
            InvalidDocumentNameError: If the filename is not acceptable.
            DuplicateDocumentError: If the filename is already registered.
        """
        name = self.validate_filename(filename)
        if name in self._documents:
            raise DuplicateDocumentError(
                f"Document already exists: {name}", context={"filename": name}
            )

        content = clean_text(content)
        self.directory.mkdir(parents=True, exist_ok=True)
        (self.directory / name).write_text(content, encoding="utf-8")

        document = Document(filename=name, content=content, chunks=self._chunk(content))
        self._documents[name] = document
        logger.info("Registered document %s (%d chunks)", name, len(document.chunks))
        return document

    def delete(self, filename: str) -> Document:
        """Remove a document file and its registry entry.

        Returns:
            The removed document, so callers can cascade to its vectors.

        Raises:
            DocumentNotFoundError: If the filename is not registered.
        """
        document = self._documents.get(filename)
        if document is None:
            raise DocumentNotFoundError(
                f"Document not found: {filename}", context={"filename": filename}
            )

        path = self.directory / filename
        if path.exists():
            path.unlink()
        else:
            logger.warning("Document file %s already missing on disk", path)

        del self._documents[filename]
        logger.info("Removed document %s", filename)
        return document

    def list(self) -> list[Document]:
        return list(self._documents.values())

    def get(self, filename: str) -> Document | None:
        return self._documents.get(filename)

    def __len__(self) -> int:
        return len(self._documents)
