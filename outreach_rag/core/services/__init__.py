from .maintenance_service import EmbeddingMaintenanceJob
from .retrieval_service import RetrievalEngine

__all__ = ["EmbeddingMaintenanceJob", "RetrievalEngine"]
