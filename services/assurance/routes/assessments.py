"""
Assessments Routes
==================

API endpoints for service standard assessments, their history and the
per-standard project summary.

Version: 0.1.0
"""

from fastapi import APIRouter, Depends, HTTPException, status

from services.assurance.services import AssessmentHandler, StandardsSummaryService
from services.assurance.storage import AssuranceStorage, get_storage
from shared.auth import User, require_admin
from shared.logging import get_logger
from shared.models import (
    AckResponse,
    Assessment,
    AssessmentSubmission,
    HistoryEntry,
    StandardSummary,
)


logger = get_logger(__name__)

router = APIRouter()

ASSESSMENT_PATH = "/projects/{project_id}/standards/{standard_id}/professions/{profession_id}"

_handler: AssessmentHandler | None = None


def get_assessment_handler(
    storage: AssuranceStorage = Depends(get_storage),
) -> AssessmentHandler:
    """Shared handler for the active storage, so writers share one lock table."""
    global _handler

    if _handler is None or _handler.storage is not storage:
        _handler = AssessmentHandler(storage)

    return _handler


def get_summary_service(
    storage: AssuranceStorage = Depends(get_storage),
) -> StandardsSummaryService:
    return StandardsSummaryService(storage)


@router.get(f"{ASSESSMENT_PATH}/assessment", response_model=Assessment)
async def get_assessment(
    project_id: str,
    standard_id: str,
    profession_id: str,
    handler: AssessmentHandler = Depends(get_assessment_handler),
) -> Assessment:
    """
    Get the current assessment of a standard for a profession.
    """
    assessment = await handler.get_assessment(project_id, standard_id, profession_id)

    if assessment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=(
                f"Assessment not found: project={project_id} "
                f"standard={standard_id} profession={profession_id}"
            ),
        )

    return assessment


@router.post(f"{ASSESSMENT_PATH}/assessment", response_model=AckResponse)
async def submit_assessment(
    project_id: str,
    standard_id: str,
    profession_id: str,
    submission: AssessmentSubmission,
    user: User = Depends(require_admin),
    handler: AssessmentHandler = Depends(get_assessment_handler),
) -> AckResponse:
    """
    Create or update an assessment and record the change in its history.

    Key fields in the body are ignored in favour of the path.
    """
    result = await handler.handle(project_id, standard_id, profession_id, submission)

    if not result.is_valid:
        raise HTTPException(
            status_code=result.status_code,
            detail=result.error_message,
        )

    logger.info(
        "assessment_submitted",
        project_id=project_id,
        standard_id=standard_id,
        profession_id=profession_id,
        user_id=user.id,
    )

    return AckResponse(message="Assessment saved")


@router.get(f"{ASSESSMENT_PATH}/history", response_model=list[HistoryEntry])
async def get_history(
    project_id: str,
    standard_id: str,
    profession_id: str,
    handler: AssessmentHandler = Depends(get_assessment_handler),
) -> list[HistoryEntry]:
    """
    List non-archived history entries, newest first.
    """
    return await handler.get_history(project_id, standard_id, profession_id)


@router.post(
    f"{ASSESSMENT_PATH}/history/{{history_id}}/archive",
    response_model=AckResponse,
)
async def archive_history_entry(
    project_id: str,
    standard_id: str,
    profession_id: str,
    history_id: str,
    user: User = Depends(require_admin),
    handler: AssessmentHandler = Depends(get_assessment_handler),
) -> AckResponse:
    """
    Archive one history entry.
    """
    archived = await handler.archive_history_entry(
        project_id, standard_id, profession_id, history_id
    )

    if not archived:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"History entry not found or already archived: {history_id}",
        )

    logger.info(
        "history_entry_archived",
        history_id=history_id,
        project_id=project_id,
        user_id=user.id,
    )

    return AckResponse(message="History entry archived")


@router.get("/projects/{project_id}/standards/summary", response_model=list[StandardSummary])
async def get_standards_summary(
    project_id: str,
    summary_service: StandardsSummaryService = Depends(get_summary_service),
) -> list[StandardSummary]:
    """
    Summarise a project's assessments by service standard.
    """
    return await summary_service.summarize(project_id)
