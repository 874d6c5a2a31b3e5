"""
Shared Models
=============

Pydantic models shared across assurance services.

Models:
- Assessment models (Assessment, HistoryEntry, StandardRating)
- Reference models (Project, ServiceStandard, Profession)
- Common response models
"""

from shared.models.assessment import (
    Assessment,
    AssessmentChanges,
    AssessmentSubmission,
    FieldChange,
    HistoryEntry,
    StandardRating,
    StandardSummary,
    StandardSummaryProfession,
)
from shared.models.common import (
    AckResponse,
    CamelModel,
    ErrorResponse,
    HealthResponse,
    utc_now,
)
from shared.models.reference import (
    Profession,
    Project,
    ServiceStandard,
)

__all__ = [
    # Assessment
    "Assessment",
    "AssessmentChanges",
    "AssessmentSubmission",
    "FieldChange",
    "HistoryEntry",
    "StandardRating",
    "StandardSummary",
    "StandardSummaryProfession",
    # Reference
    "Project",
    "ServiceStandard",
    "Profession",
    # Common
    "AckResponse",
    "CamelModel",
    "ErrorResponse",
    "HealthResponse",
    "utc_now",
]
