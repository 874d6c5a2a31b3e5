"""
Assessment Models
=================

Models for per-profession service standard assessments and their
audit history.

Version: 0.1.0
"""

from datetime import datetime
from enum import Enum

from pydantic import Field

from shared.models.common import CamelModel, utc_now


class StandardRating(str, Enum):
    """
    Rating of one service standard for one profession.

    Member order is the order used when listing accepted values.
    """

    PENDING = "PENDING"
    RED = "RED"
    AMBER = "AMBER"
    GREEN = "GREEN"

    @classmethod
    def parse(cls, value: str | None) -> "StandardRating | None":
        """Case-insensitive lookup; None for anything outside the set."""
        if not value:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None

    @classmethod
    def accepted_values(cls) -> str:
        """Accepted literals, comma separated, for client-facing messages."""
        return ", ".join(rating.value for rating in cls)


class AssessmentSubmission(CamelModel):
    """Body of a create-or-update request for one assessment."""

    status: str | None = None
    commentary: str | None = None
    changed_by: str | None = None

    # Accepted but overwritten from the path
    id: str | None = None
    project_id: str | None = None
    standard_id: str | None = None
    profession_id: str | None = None


class Assessment(CamelModel):
    """Current rating of a standard for a profession on a project."""

    id: str = Field(..., description="Surface identifier (ObjectId hex)")
    project_id: str
    standard_id: str
    profession_id: str
    status: StandardRating
    commentary: str = ""
    changed_by: str
    last_updated: datetime = Field(default_factory=utc_now)

    @property
    def key(self) -> tuple[str, str, str]:
        """Composite identity of the assessment."""
        return (self.project_id, self.standard_id, self.profession_id)


class FieldChange(CamelModel):
    """Before and after values of one tracked field."""

    from_: str = Field(default="", alias="from")
    to: str = ""


class AssessmentChanges(CamelModel):
    """Diff of the tracked assessment fields."""

    status: FieldChange
    commentary: FieldChange


class HistoryEntry(CamelModel):
    """Immutable audit record of one assessment write."""

    id: str
    project_id: str
    standard_id: str
    profession_id: str
    timestamp: datetime
    changed_by: str
    changes: AssessmentChanges
    archived: bool = False


class StandardSummaryProfession(CamelModel):
    """One profession's assessment within a standard summary."""

    profession_id: str
    status: StandardRating
    commentary: str = ""
    last_updated: datetime


class StandardSummary(CamelModel):
    """Assessments for one standard on a project, rolled up across professions."""

    standard_id: str
    aggregated_status: str
    aggregated_commentary: str = ""
    last_updated: datetime
    professions: list[StandardSummaryProfession] = Field(default_factory=list)
