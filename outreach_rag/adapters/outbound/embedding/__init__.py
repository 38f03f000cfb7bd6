from .http_embedding_adapter import HttpEmbeddingAdapter

__all__ = ["HttpEmbeddingAdapter"]
