"""
Standards Summary
=================

Rolls a project's current assessments up to one row per service
standard, computed on read.

The aggregated status of a standard is the most severe rating among its
professions: RED, then AMBER, then GREEN, then PENDING.

Version: 0.1.0
"""

from collections import defaultdict
from collections.abc import Iterable

from services.assurance.storage import AssuranceStorage
from shared.logging import get_logger
from shared.models import (
    Assessment,
    StandardRating,
    StandardSummary,
    StandardSummaryProfession,
)


logger = get_logger(__name__)

NOT_UPDATED = "NOT_UPDATED"

STATUS_PRIORITY: tuple[StandardRating, ...] = (
    StandardRating.RED,
    StandardRating.AMBER,
    StandardRating.GREEN,
    StandardRating.PENDING,
)


def aggregate_status(statuses: Iterable[StandardRating]) -> str:
    """Most severe rating present, or NOT_UPDATED if there is none."""
    present = set(statuses)
    for rating in STATUS_PRIORITY:
        if rating in present:
            return rating.value
    return NOT_UPDATED


def aggregate_commentary(commentaries: Iterable[str]) -> str:
    return "; ".join(c.strip() for c in commentaries if c and c.strip())


class StandardsSummaryService:
    """Builds the per-standard summary of a project."""

    def __init__(self, storage: AssuranceStorage) -> None:
        self._storage = storage

    async def summarize(self, project_id: str) -> list[StandardSummary]:
        """
        Summarise a project's assessments by service standard.

        Args:
            project_id: Project to summarise

        Returns:
            One StandardSummary per standard with at least one assessment,
            ordered by standard id
        """
        assessments = await self._storage.assessments.list_by_project(project_id)

        by_standard: dict[str, list[Assessment]] = defaultdict(list)
        for assessment in assessments:
            by_standard[assessment.standard_id].append(assessment)

        summaries = []
        for standard_id in sorted(by_standard):
            group = sorted(by_standard[standard_id], key=lambda a: a.profession_id)
            summaries.append(
                StandardSummary(
                    standard_id=standard_id,
                    aggregated_status=aggregate_status(a.status for a in group),
                    aggregated_commentary=aggregate_commentary(a.commentary for a in group),
                    last_updated=max(a.last_updated for a in group),
                    professions=[
                        StandardSummaryProfession(
                            profession_id=a.profession_id,
                            status=a.status,
                            commentary=a.commentary,
                            last_updated=a.last_updated,
                        )
                        for a in group
                    ],
                )
            )

        logger.debug(
            "standards_summary_built",
            project_id=project_id,
            standards=len(summaries),
            assessments=len(assessments),
        )

        return summaries
