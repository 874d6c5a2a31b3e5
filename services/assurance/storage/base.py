"""
Storage Interfaces
==================

Abstract stores consumed by the assessment services. Each backend
(MongoDB, in-memory) provides one implementation of every store plus an
``AssuranceStorage`` bundle that groups them with a transaction scope.

Write methods take an optional ``session``; backends without sessions
ignore it.

Version: 0.1.0
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Any

from shared.models import (
    Assessment,
    HistoryEntry,
    Profession,
    Project,
    ServiceStandard,
)


class ProjectStore(ABC):
    """Keyed access to projects."""

    @abstractmethod
    async def get_by_id(self, project_id: str) -> Project | None:
        """Get a project, or None if it does not exist."""

    @abstractmethod
    async def list_all(self) -> list[Project]:
        """List all projects ordered by name."""

    @abstractmethod
    async def create(self, project: Project) -> Project:
        """Insert a new project."""


class CatalogueStore(ABC):
    """
    Keyed access to a soft-deletable catalogue.

    ``get_active_by_id`` filters on ``is_active`` inside the query so an
    inactive entry cannot be told apart from a missing one.
    """

    @abstractmethod
    async def get_by_id(self, item_id: str) -> Any | None:
        """Get an entry regardless of its active flag."""

    @abstractmethod
    async def get_active_by_id(self, item_id: str) -> Any | None:
        """Get an entry only if it is active."""

    @abstractmethod
    async def list_active(self) -> list[Any]:
        """List active entries."""

    @abstractmethod
    async def create(self, item: Any) -> Any:
        """Insert a new entry."""

    @abstractmethod
    async def soft_delete(self, item_id: str, deleted_by: str) -> bool:
        """Mark an active entry inactive. False if none was active."""

    @abstractmethod
    async def restore(self, item_id: str) -> bool:
        """Reactivate an inactive entry. False if none was inactive."""


class ServiceStandardStore(CatalogueStore):
    """Service standard catalogue."""

    @abstractmethod
    async def get_by_id(self, item_id: str) -> ServiceStandard | None: ...

    @abstractmethod
    async def get_active_by_id(self, item_id: str) -> ServiceStandard | None: ...


class ProfessionStore(CatalogueStore):
    """Profession catalogue."""

    @abstractmethod
    async def get_by_id(self, item_id: str) -> Profession | None: ...

    @abstractmethod
    async def get_active_by_id(self, item_id: str) -> Profession | None: ...


class AssessmentStore(ABC):
    """Current-state assessments keyed by (project, standard, profession)."""

    @abstractmethod
    async def get(
        self,
        project_id: str,
        standard_id: str,
        profession_id: str,
    ) -> Assessment | None:
        """Point lookup; None when no assessment exists for the key."""

    @abstractmethod
    async def list_by_project(self, project_id: str) -> list[Assessment]:
        """All current assessments of a project."""

    @abstractmethod
    async def upsert(self, assessment: Assessment, session: Any | None = None) -> None:
        """Replace the assessment with the same composite key, or insert it."""


class HistoryStore(ABC):
    """Append-only assessment history."""

    @abstractmethod
    async def add(self, entry: HistoryEntry, session: Any | None = None) -> None:
        """Append an entry."""

    @abstractmethod
    async def list_active(
        self,
        project_id: str,
        standard_id: str,
        profession_id: str,
    ) -> list[HistoryEntry]:
        """Non-archived entries for the key, newest first."""

    @abstractmethod
    async def archive(
        self,
        project_id: str,
        standard_id: str,
        profession_id: str,
        history_id: str,
    ) -> bool:
        """Flag a non-archived entry as archived. False if nothing matched."""


class AssuranceStorage(ABC):
    """All stores of one backend."""

    projects: ProjectStore
    standards: ServiceStandardStore
    professions: ProfessionStore
    assessments: AssessmentStore
    history: HistoryStore

    @property
    @abstractmethod
    def backend(self) -> str:
        """Backend name, as configured."""

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[Any]:
        """Scope in which the assessment upsert and history append commit together."""

    async def connect(self) -> None:
        """Prepare the backend (indexes, connections)."""

    async def close(self) -> None:
        """Release backend resources."""

    @abstractmethod
    async def health_check(self) -> dict[str, Any]:
        """Backend health for the /health endpoint."""

