from .file_document_store import SUPPORTED_EXTENSIONS, FileDocumentStore

__all__ = ["FileDocumentStore", "SUPPORTED_EXTENSIONS"]
