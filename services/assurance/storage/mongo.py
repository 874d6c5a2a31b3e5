"""
MongoDB Storage
===============

Motor-backed implementation of the assurance stores.

Documents are stored with camelCase keys (the API's wire names) and the
surface identifier in ``_id``.

Version: 0.1.0
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

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
from shared.database.mongodb import (
    ASSESSMENT_HISTORY,
    ASSESSMENTS,
    PROFESSIONS,
    PROJECTS,
    SERVICE_STANDARDS,
    MongoDBClient,
)
from shared.logging import get_logger
from shared.models import (
    Assessment,
    CamelModel,
    HistoryEntry,
    Profession,
    Project,
    ServiceStandard,
)

logger = get_logger(__name__)


def to_document(model: CamelModel) -> dict[str, Any]:
    """Dump a model for storage, moving ``id`` to ``_id``."""
    doc = model.model_dump(by_alias=True)
    doc["_id"] = doc.pop("id")
    if "status" in doc and hasattr(doc["status"], "value"):
        doc["status"] = doc["status"].value
    return doc


def from_document(model: type[CamelModel], doc: dict[str, Any]) -> Any:
    """Rebuild a model from a stored document."""
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    return model.model_validate(data)


def _key_filter(project_id: str, standard_id: str, profession_id: str) -> dict[str, Any]:
    return {
        "projectId": project_id,
        "standardId": standard_id,
        "professionId": profession_id,
    }


class MongoProjectStore(ProjectStore):
    """Projects collection."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:  # type: ignore[type-arg]
        self._collection = db[PROJECTS]

    async def get_by_id(self, project_id: str) -> Project | None:
        doc = await self._collection.find_one({"_id": project_id})
        return from_document(Project, doc) if doc else None

    async def list_all(self) -> list[Project]:
        cursor = self._collection.find({}).sort("name", ASCENDING)
        return [from_document(Project, doc) async for doc in cursor]

    async def create(self, project: Project) -> Project:
        await self._collection.insert_one(to_document(project))
        return project


class MongoCatalogueStore(CatalogueStore):
    """Soft-deletable catalogue collection."""

    model: type[CamelModel]
    sort_field: str

    def __init__(self, db: AsyncIOMotorDatabase, collection: str) -> None:  # type: ignore[type-arg]
        self._collection = db[collection]

    async def get_by_id(self, item_id: str) -> Any | None:
        doc = await self._collection.find_one({"_id": item_id})
        return from_document(self.model, doc) if doc else None

    async def get_active_by_id(self, item_id: str) -> Any | None:
        doc = await self._collection.find_one({"_id": item_id, "isActive": True})
        return from_document(self.model, doc) if doc else None

    async def list_active(self) -> list[Any]:
        cursor = self._collection.find({"isActive": True}).sort(self.sort_field, ASCENDING)
        return [from_document(self.model, doc) async for doc in cursor]

    async def create(self, item: Any) -> Any:
        await self._collection.insert_one(to_document(item))
        return item

    async def soft_delete(self, item_id: str, deleted_by: str) -> bool:
        now = datetime.now(UTC)
        result = await self._collection.update_one(
            {"_id": item_id, "isActive": True},
            {
                "$set": {
                    "isActive": False,
                    "deletedAt": now,
                    "deletedBy": deleted_by,
                    "updatedAt": now,
                }
            },
        )
        return result.modified_count > 0

    async def restore(self, item_id: str) -> bool:
        result = await self._collection.update_one(
            {"_id": item_id, "isActive": False},
            {
                "$set": {"isActive": True, "updatedAt": datetime.now(UTC)},
                "$unset": {"deletedAt": "", "deletedBy": ""},
            },
        )
        return result.modified_count > 0


class MongoServiceStandardStore(MongoCatalogueStore, ServiceStandardStore):
    """Service standards collection."""

    model = ServiceStandard
    sort_field = "number"

    def __init__(self, db: AsyncIOMotorDatabase) -> None:  # type: ignore[type-arg]
        super().__init__(db, SERVICE_STANDARDS)


class MongoProfessionStore(MongoCatalogueStore, ProfessionStore):
    """Professions collection."""

    model = Profession
    sort_field = "name"

    def __init__(self, db: AsyncIOMotorDatabase) -> None:  # type: ignore[type-arg]
        super().__init__(db, PROFESSIONS)


class MongoAssessmentStore(AssessmentStore):
    """Current assessments collection, unique on the composite key."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:  # type: ignore[type-arg]
        self._collection = db[ASSESSMENTS]

    async def get(
        self,
        project_id: str,
        standard_id: str,
        profession_id: str,
    ) -> Assessment | None:
        doc = await self._collection.find_one(
            _key_filter(project_id, standard_id, profession_id)
        )
        return from_document(Assessment, doc) if doc else None

    async def list_by_project(self, project_id: str) -> list[Assessment]:
        cursor = self._collection.find({"projectId": project_id})
        return [from_document(Assessment, doc) async for doc in cursor]

    async def upsert(self, assessment: Assessment, session: Any | None = None) -> None:
        await self._collection.replace_one(
            _key_filter(*assessment.key),
            to_document(assessment),
            upsert=True,
            session=session,
        )


class MongoHistoryStore(HistoryStore):
    """Assessment history collection."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:  # type: ignore[type-arg]
        self._collection = db[ASSESSMENT_HISTORY]

    async def add(self, entry: HistoryEntry, session: Any | None = None) -> None:
        await self._collection.insert_one(to_document(entry), session=session)

    async def list_active(
        self,
        project_id: str,
        standard_id: str,
        profession_id: str,
    ) -> list[HistoryEntry]:
        query = _key_filter(project_id, standard_id, profession_id)
        query["archived"] = False
        # ObjectId ids grow with insertion, so they order equal timestamps
        cursor = self._collection.find(query).sort(
            [("timestamp", DESCENDING), ("_id", DESCENDING)]
        )
        return [from_document(HistoryEntry, doc) async for doc in cursor]

    async def archive(
        self,
        project_id: str,
        standard_id: str,
        profession_id: str,
        history_id: str,
    ) -> bool:
        query = _key_filter(project_id, standard_id, profession_id)
        query.update({"_id": history_id, "archived": False})
        result = await self._collection.update_one(query, {"$set": {"archived": True}})
        return result.modified_count > 0


class MongoAssuranceStorage(AssuranceStorage):
    """MongoDB assurance storage."""

    def __init__(self, db: AsyncIOMotorDatabase | None = None) -> None:  # type: ignore[type-arg]
        self._db = db if db is not None else MongoDBClient.get_database()
        self.projects = MongoProjectStore(self._db)
        self.standards = MongoServiceStandardStore(self._db)
        self.professions = MongoProfessionStore(self._db)
        self.assessments = MongoAssessmentStore(self._db)
        self.history = MongoHistoryStore(self._db)

    @property
    def backend(self) -> str:
        return StorageBackend.MONGODB.value

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[Any, None]:
        async with MongoDBClient.transaction() as session:
            yield session

    async def connect(self) -> None:
        await MongoDBClient.create_indexes(self._db)
        logger.info("mongodb_storage_ready", database=self._db.name)

    async def close(self) -> None:
        await MongoDBClient.close()

    async def health_check(self) -> dict[str, Any]:
        health = await MongoDBClient.health_check()
        health["backend"] = self.backend
        return health
