"""
Assessment Validation
=====================

Business and referential checks run before an assessment is written.

Checks, in order, stopping at the first failure:
1. Status present
2. Status is a rating (case-insensitive)
3. Project exists
4. Service standard exists and is active
5. Profession exists and is active

Version: 0.1.0
"""

from dataclasses import dataclass

from fastapi import status as http_status

from services.assurance.services.resolver import ReferenceResolver
from shared.logging import get_logger
from shared.models import AssessmentSubmission, StandardRating


logger = get_logger(__name__)


@dataclass(frozen=True)
class AssessmentResult:
    """Outcome of validating or handling an assessment write."""

    is_valid: bool
    status_code: int = http_status.HTTP_200_OK
    error_message: str | None = None

    @classmethod
    def success(cls) -> "AssessmentResult":
        return cls(is_valid=True)

    @classmethod
    def bad_request(cls, message: str) -> "AssessmentResult":
        return cls(
            is_valid=False,
            status_code=http_status.HTTP_400_BAD_REQUEST,
            error_message=message,
        )

    @classmethod
    def error(cls, message: str) -> "AssessmentResult":
        return cls(
            is_valid=False,
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_message=message,
        )


class AssessmentValidator:
    """Validates an assessment submission against its key."""

    def __init__(self, resolver: ReferenceResolver) -> None:
        self._resolver = resolver

    async def validate(
        self,
        project_id: str,
        standard_id: str,
        profession_id: str,
        submission: AssessmentSubmission,
    ) -> AssessmentResult:
        """
        Validate a submission.

        Args:
            project_id: Project from the request path
            standard_id: Service standard from the request path
            profession_id: Profession from the request path
            submission: Request body

        Returns:
            AssessmentResult, success or a 400 with a client-facing message
        """
        if not submission.status:
            logger.warning("assessment_status_missing")
            return AssessmentResult.bad_request("Assessment status is required")

        if StandardRating.parse(submission.status) is None:
            logger.warning("assessment_status_invalid", status=submission.status)
            return AssessmentResult.bad_request(
                f"Invalid status: {submission.status}. "
                f"Valid statuses are: {StandardRating.accepted_values()}"
            )

        if await self._resolver.resolve_project(project_id) is None:
            logger.warning("assessment_project_not_found", project_id=project_id)
            return AssessmentResult.bad_request("Referenced project does not exist")

        if await self._resolver.resolve_active_standard(standard_id) is None:
            logger.warning("assessment_standard_not_found", standard_id=standard_id)
            return AssessmentResult.bad_request(
                "Referenced service standard does not exist or is inactive"
            )

        if await self._resolver.resolve_active_profession(profession_id) is None:
            logger.warning("assessment_profession_not_found", profession_id=profession_id)
            return AssessmentResult.bad_request(
                "Referenced profession does not exist or is inactive"
            )

        return AssessmentResult.success()
