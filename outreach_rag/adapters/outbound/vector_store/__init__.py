from .json_vector_store import JsonVectorStore

__all__ = ["JsonVectorStore"]
