"""
Assurance Storage
=================

Persistence backends for assessments, assessment history and the
reference catalogues (projects, service standards, professions).

Supports:
- MongoDB (motor)
- In-memory (development/testing)

Usage:
    from services.assurance.storage import get_storage

    storage = get_storage()
    assessment = await storage.assessments.get(project_id, standard_id, profession_id)
"""

from services.assurance.storage.base import (
    AssessmentStore,
    AssuranceStorage,
    CatalogueStore,
    HistoryStore,
    ProfessionStore,
    ProjectStore,
    ServiceStandardStore,
)
from services.assurance.storage.memory import InMemoryAssuranceStorage
from shared.config import StorageBackend, settings
from shared.logging import get_logger

logger = get_logger(__name__)

_storage: AssuranceStorage | None = None


def get_storage() -> AssuranceStorage:
    """
    Get the configured storage instance.

    Returns:
        AssuranceStorage for the backend named in settings
    """
    global _storage

    if _storage is None:
        backend = settings.storage_backend

        if backend == StorageBackend.MEMORY:
            _storage = InMemoryAssuranceStorage()
        elif backend == StorageBackend.MONGODB:
            from services.assurance.storage.mongo import MongoAssuranceStorage

            _storage = MongoAssuranceStorage()
        else:
            raise ValueError(f"Unknown storage backend: {backend}")

        logger.info("storage_initialized", backend=backend.value)

    return _storage


def set_storage(storage: AssuranceStorage) -> None:
    """
    Set a custom storage instance.

    Args:
        storage: AssuranceStorage instance
    """
    global _storage
    _storage = storage
    logger.info("storage_set", backend=storage.backend)


def reset_storage() -> None:
    """Reset the storage to be re-initialized."""
    global _storage
    _storage = None


__all__ = [
    "AssuranceStorage",
    "ProjectStore",
    "CatalogueStore",
    "ServiceStandardStore",
    "ProfessionStore",
    "AssessmentStore",
    "HistoryStore",
    "InMemoryAssuranceStorage",
    "get_storage",
    "set_storage",
    "reset_storage",
]
