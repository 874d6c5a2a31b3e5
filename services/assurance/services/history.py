"""
Assessment History
==================

Records one immutable history entry per assessment write and serves the
audit trail.

Each entry carries a from/to pair for every tracked field (status,
commentary). On the first write of a key there is no previous
assessment and every ``from`` is the empty string.

Version: 0.1.0
"""

from typing import Any

from bson import ObjectId

from services.assurance.storage import HistoryStore
from shared.logging import get_logger
from shared.models import (
    Assessment,
    AssessmentChanges,
    FieldChange,
    HistoryEntry,
)


logger = get_logger(__name__)


def compute_changes(new: Assessment, previous: Assessment | None) -> AssessmentChanges:
    """Diff the tracked fields of two assessments."""
    return AssessmentChanges(
        status=FieldChange(
            from_=previous.status.value if previous else "",
            to=new.status.value,
        ),
        commentary=FieldChange(
            from_=(previous.commentary or "") if previous else "",
            to=new.commentary or "",
        ),
    )


class HistoryRecorder:
    """
    Append-only audit trail of assessment writes.

    The actor and timestamp of an entry are the new assessment's own
    ``changed_by`` and ``last_updated``.
    """

    def __init__(self, store: HistoryStore) -> None:
        self._store = store

    async def append(
        self,
        new: Assessment,
        previous: Assessment | None,
        session: Any | None = None,
    ) -> HistoryEntry:
        """
        Record the change from ``previous`` to ``new``.

        Args:
            new: Assessment as just written
            previous: Assessment before the write, None on first write
            session: Backend transaction session, if any

        Returns:
            The stored HistoryEntry
        """
        entry = HistoryEntry(
            id=str(ObjectId()),
            project_id=new.project_id,
            standard_id=new.standard_id,
            profession_id=new.profession_id,
            timestamp=new.last_updated,
            changed_by=new.changed_by,
            changes=compute_changes(new, previous),
        )

        await self._store.add(entry, session=session)

        logger.info(
            "assessment_history_recorded",
            history_id=entry.id,
            project_id=entry.project_id,
            standard_id=entry.standard_id,
            profession_id=entry.profession_id,
            status_from=entry.changes.status.from_,
            status_to=entry.changes.status.to,
        )

        return entry

    async def get_history(
        self,
        project_id: str,
        standard_id: str,
        profession_id: str,
    ) -> list[HistoryEntry]:
        """Non-archived entries, newest first. Empty on storage failure."""
        try:
            return await self._store.list_active(project_id, standard_id, profession_id)
        except Exception as e:
            logger.error(
                "assessment_history_read_failed",
                project_id=project_id,
                standard_id=standard_id,
                profession_id=profession_id,
                error=str(e),
            )
            return []

    async def archive(
        self,
        project_id: str,
        standard_id: str,
        profession_id: str,
        history_id: str,
    ) -> bool:
        """Hide an entry from the trail. False if no visible entry matched."""
        archived = await self._store.archive(project_id, standard_id, profession_id, history_id)

        logger.info(
            "assessment_history_archive",
            history_id=history_id,
            project_id=project_id,
            standard_id=standard_id,
            profession_id=profession_id,
            archived=archived,
        )

        return archived
