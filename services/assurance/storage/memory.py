"""
In-Memory Storage
=================

Dict-backed implementation of the assurance stores for development and
testing. Data is lost on restart.

Version: 0.1.0
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from services.assurance.storage.base import (
    AssessmentStore,
    AssuranceStorage,
    CatalogueStore,
    HistoryStore,
    ProfessionStore,
    ProjectStore,
    ServiceStandardStore,
)
from shared.config import StorageBackend
from shared.logging import get_logger
from shared.models import Assessment, HistoryEntry, Project

logger = get_logger(__name__)

Key = tuple[str, str, str]


class InMemoryProjectStore(ProjectStore):
    """Projects held in a dict."""

    def __init__(self) -> None:
        self._projects: dict[str, Project] = {}

    async def get_by_id(self, project_id: str) -> Project | None:
        project = self._projects.get(project_id)
        return project.model_copy(deep=True) if project else None

    async def list_all(self) -> list[Project]:
        return [
            p.model_copy(deep=True)
            for p in sorted(self._projects.values(), key=lambda p: p.name)
        ]

    async def create(self, project: Project) -> Project:
        if project.id in self._projects:
            raise ValueError(f"Project already exists: {project.id}")
        self._projects[project.id] = project.model_copy(deep=True)
        return project


class InMemoryCatalogueStore(CatalogueStore):
    """Soft-deletable catalogue held in a dict."""

    def __init__(self) -> None:
        self._items: dict[str, Any] = {}

    async def get_by_id(self, item_id: str) -> Any | None:
        item = self._items.get(item_id)
        return item.model_copy(deep=True) if item else None

    async def get_active_by_id(self, item_id: str) -> Any | None:
        item = self._items.get(item_id)
        if item is None or not item.is_active:
            return None
        return item.model_copy(deep=True)

    async def list_active(self) -> list[Any]:
        return [i.model_copy(deep=True) for i in self._items.values() if i.is_active]

    async def create(self, item: Any) -> Any:
        if item.id in self._items:
            raise ValueError(f"Catalogue entry already exists: {item.id}")
        self._items[item.id] = item.model_copy(deep=True)
        return item

    async def soft_delete(self, item_id: str, deleted_by: str) -> bool:
        item = self._items.get(item_id)
        if item is None or not item.is_active:
            return False
        now = datetime.now(UTC)
        item.is_active = False
        item.deleted_at = now
        item.deleted_by = deleted_by
        item.updated_at = now
        return True

    async def restore(self, item_id: str) -> bool:
        item = self._items.get(item_id)
        if item is None or item.is_active:
            return False
        item.is_active = True
        item.deleted_at = None
        item.deleted_by = None
        item.updated_at = datetime.now(UTC)
        return True


class InMemoryServiceStandardStore(InMemoryCatalogueStore, ServiceStandardStore):
    """Service standards held in a dict."""

    async def list_active(self) -> list[Any]:
        return sorted(await super().list_active(), key=lambda s: s.number)


class InMemoryProfessionStore(InMemoryCatalogueStore, ProfessionStore):
    """Professions held in a dict."""

    async def list_active(self) -> list[Any]:
        return sorted(await super().list_active(), key=lambda p: p.name)


class InMemoryAssessmentStore(AssessmentStore):
    """Current assessments keyed by composite key."""

    def __init__(self) -> None:
        self._assessments: dict[Key, Assessment] = {}

    async def get(
        self,
        project_id: str,
        standard_id: str,
        profession_id: str,
    ) -> Assessment | None:
        assessment = self._assessments.get((project_id, standard_id, profession_id))
        return assessment.model_copy(deep=True) if assessment else None

    async def list_by_project(self, project_id: str) -> list[Assessment]:
        return [
            a.model_copy(deep=True)
            for key, a in self._assessments.items()
            if key[0] == project_id
        ]

    async def upsert(self, assessment: Assessment, session: Any | None = None) -> None:
        for key, existing in self._assessments.items():
            if existing.id == assessment.id and key != assessment.key:
                raise ValueError(f"Assessment id already in use: {assessment.id}")
        self._assessments[assessment.key] = assessment.model_copy(deep=True)


class InMemoryHistoryStore(HistoryStore):
    """History entries in insertion order."""

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []

    async def add(self, entry: HistoryEntry, session: Any | None = None) -> None:
        self._entries.append(entry.model_copy(deep=True))

    async def list_active(
        self,
        project_id: str,
        standard_id: str,
        profession_id: str,
    ) -> list[HistoryEntry]:
        matching = [
            e.model_copy(deep=True)
            for e in reversed(self._entries)
            if not e.archived
            and e.project_id == project_id
            and e.standard_id == standard_id
            and e.profession_id == profession_id
        ]
        # Stable sort keeps later insertions first among equal timestamps
        return sorted(matching, key=lambda e: e.timestamp, reverse=True)

    async def archive(
        self,
        project_id: str,
        standard_id: str,
        profession_id: str,
        history_id: str,
    ) -> bool:
        for entry in self._entries:
            if (
                entry.id == history_id
                and entry.project_id == project_id
                and entry.standard_id == standard_id
                and entry.profession_id == profession_id
                and not entry.archived
            ):
                entry.archived = True
                return True
        return False

    def __len__(self) -> int:
        return len(self._entries)


class InMemoryAssuranceStorage(AssuranceStorage):
    """
    In-memory assurance storage.

    The transaction scope is a no-op and nothing is rolled back. If the
    history append fails after the assessment upsert, the new assessment
    stays in place without a matching history entry.
    """

    def __init__(self) -> None:
        self.projects = InMemoryProjectStore()
        self.standards = InMemoryServiceStandardStore()
        self.professions = InMemoryProfessionStore()
        self.assessments = InMemoryAssessmentStore()
        self.history = InMemoryHistoryStore()
        logger.debug("memory_storage_initialized")

    @property
    def backend(self) -> str:
        return StorageBackend.MEMORY.value

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[None, None]:
        yield None

    async def health_check(self) -> dict[str, Any]:
        return {
            "status": "healthy",
            "backend": self.backend,
            "history_entries": len(self.history),
        }
