"""
Reference Resolver
==================

Read-through lookups of the entities an assessment points at. Inactive
standards and professions resolve to None, same as missing ones.

Version: 0.1.0
"""

from services.assurance.storage import AssuranceStorage
from shared.models import Profession, Project, ServiceStandard


class ReferenceResolver:
    """Resolves projects, active service standards and active professions."""

    def __init__(self, storage: AssuranceStorage) -> None:
        self._storage = storage

    async def resolve_project(self, project_id: str) -> Project | None:
        return await self._storage.projects.get_by_id(project_id)

    async def resolve_active_standard(self, standard_id: str) -> ServiceStandard | None:
        return await self._storage.standards.get_active_by_id(standard_id)

    async def resolve_active_profession(self, profession_id: str) -> Profession | None:
        return await self._storage.professions.get_active_by_id(profession_id)
