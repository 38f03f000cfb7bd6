"""FastAPI dependency injection for the knowledge engine."""

from ....composition import container
from ....core.services import EmbeddingMaintenanceJob, RetrievalEngine


def get_engine() -> RetrievalEngine:
    """Process-wide retrieval engine (initialized on first use)."""
    return container.get_engine()


def get_maintenance_job() -> EmbeddingMaintenanceJob:
    """Process-wide embedding maintenance job."""
    return container.get_maintenance_job()


def get_engine_state() -> str:
    """Engine readiness without forcing initialization."""
    if container.get_engine.cache_info().currsize == 0:
        return "not initialized"
    return "ready" if container.get_engine().is_ready else "not initialized"
