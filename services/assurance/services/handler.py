"""
Assessment Handler
==================

Create-or-update of one assessment with its audit entry.

Flow per submission:
1. Validate (status, then references)
2. Read the previous assessment for the key
3. Build the candidate: key from the path, fresh timestamp, id and actor
   carried over from the previous assessment where present
4. Upsert the candidate
5. Append the history entry

Steps 2-5 run under a per-key lock and, when the backend supports it,
inside one transaction. Any fault in steps 1-5 comes back as a 500
result rather than an exception.

Version: 0.1.0
"""

from bson import ObjectId

from services.assurance.services.history import HistoryRecorder
from services.assurance.services.locks import KeyedLock
from services.assurance.services.resolver import ReferenceResolver
from services.assurance.services.validator import AssessmentResult, AssessmentValidator
from services.assurance.storage import AssuranceStorage
from shared.config import settings
from shared.logging import get_logger
from shared.models import (
    Assessment,
    AssessmentSubmission,
    HistoryEntry,
    StandardRating,
    utc_now,
)


logger = get_logger(__name__)


class AssessmentHandler:
    """
    Entry point for assessment writes and reads.

    Usage:
        handler = AssessmentHandler(get_storage())
        result = await handler.handle("P1", "S1", "F1", submission)
        if not result.is_valid:
            raise HTTPException(result.status_code, result.error_message)
    """

    def __init__(
        self,
        storage: AssuranceStorage,
        validator: AssessmentValidator | None = None,
        recorder: HistoryRecorder | None = None,
        locks: KeyedLock | None = None,
    ) -> None:
        self._storage = storage
        self._validator = validator or AssessmentValidator(ReferenceResolver(storage))
        self._recorder = recorder or HistoryRecorder(storage.history)
        self._locks = locks or KeyedLock()

    @property
    def storage(self) -> AssuranceStorage:
        return self._storage

    async def handle(
        self,
        project_id: str,
        standard_id: str,
        profession_id: str,
        submission: AssessmentSubmission,
    ) -> AssessmentResult:
        """
        Create or update the assessment for a key and record the change.

        Args:
            project_id: Project from the request path
            standard_id: Service standard from the request path
            profession_id: Profession from the request path
            submission: Request body

        Returns:
            AssessmentResult: success, 400 from validation, or 500 on fault
        """
        key = (project_id, standard_id, profession_id)

        try:
            result = await self._validator.validate(
                project_id, standard_id, profession_id, submission
            )
            if not result.is_valid:
                logger.warning(
                    "assessment_validation_failed",
                    project_id=project_id,
                    standard_id=standard_id,
                    profession_id=profession_id,
                    error=result.error_message,
                )
                return result

            async with self._locks.hold(key):
                previous = await self._storage.assessments.get(*key)
                candidate = self._build_candidate(key, submission, previous)

                async with self._storage.transaction() as session:
                    await self._storage.assessments.upsert(candidate, session=session)
                    await self._recorder.append(candidate, previous, session=session)
        except Exception as e:
            logger.error(
                "assessment_processing_failed",
                project_id=project_id,
                standard_id=standard_id,
                profession_id=profession_id,
                error=str(e),
                exc_info=True,
            )
            return AssessmentResult.error(f"Failed to process assessment: {e}")

        logger.info(
            "assessment_upserted",
            assessment_id=candidate.id,
            project_id=project_id,
            standard_id=standard_id,
            profession_id=profession_id,
            status=candidate.status.value,
            changed_by=candidate.changed_by,
            created=previous is None,
        )

        return AssessmentResult.success()

    def _build_candidate(
        self,
        key: tuple[str, str, str],
        submission: AssessmentSubmission,
        previous: Assessment | None,
    ) -> Assessment:
        project_id, standard_id, profession_id = key

        if previous is not None:
            assessment_id = previous.id
            changed_by = submission.changed_by or previous.changed_by
        else:
            assessment_id = submission.id or str(ObjectId())
            changed_by = submission.changed_by or settings.assessment.unknown_actor

        return Assessment(
            id=assessment_id,
            project_id=project_id,
            standard_id=standard_id,
            profession_id=profession_id,
            status=StandardRating.parse(submission.status),
            commentary=submission.commentary or "",
            changed_by=changed_by,
            last_updated=utc_now(),
        )

    async def get_assessment(
        self,
        project_id: str,
        standard_id: str,
        profession_id: str,
    ) -> Assessment | None:
        return await self._storage.assessments.get(project_id, standard_id, profession_id)

    async def get_history(
        self,
        project_id: str,
        standard_id: str,
        profession_id: str,
    ) -> list[HistoryEntry]:
        return await self._recorder.get_history(project_id, standard_id, profession_id)

    async def archive_history_entry(
        self,
        project_id: str,
        standard_id: str,
        profession_id: str,
        history_id: str,
    ) -> bool:
        """
        Archive a history entry.

        With reconciliation enabled the current assessment is rebuilt
        from the newest entry still visible. The assessment is never
        removed, even when no visible entry remains.

        Returns:
            True if a visible entry was archived
        """
        key = (project_id, standard_id, profession_id)

        async with self._locks.hold(key):
            archived = await self._recorder.archive(*key, history_id)

            if archived and settings.assessment.reconcile_on_archive:
                await self._reconcile(key)

        return archived

    async def _reconcile(self, key: tuple[str, str, str]) -> None:
        current = await self._storage.assessments.get(*key)
        if current is None:
            return

        remaining = await self._storage.history.list_active(*key)
        if not remaining:
            logger.info(
                "assessment_reconcile_skipped",
                project_id=key[0],
                standard_id=key[1],
                profession_id=key[2],
                reason="no_visible_history",
            )
            return

        newest = remaining[0]
        status = StandardRating.parse(newest.changes.status.to)
        if status is None:
            logger.warning(
                "assessment_reconcile_skipped",
                project_id=key[0],
                standard_id=key[1],
                profession_id=key[2],
                reason="unrecognised_status",
                status=newest.changes.status.to,
            )
            return

        reconciled = current.model_copy(
            update={
                "status": status,
                "commentary": newest.changes.commentary.to,
                "changed_by": newest.changed_by,
                "last_updated": newest.timestamp,
            }
        )

        async with self._storage.transaction() as session:
            await self._storage.assessments.upsert(reconciled, session=session)

        logger.info(
            "assessment_reconciled",
            assessment_id=reconciled.id,
            project_id=key[0],
            standard_id=key[1],
            profession_id=key[2],
            status=status.value,
            from_history_id=newest.id,
        )
