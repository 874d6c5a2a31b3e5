"""
Assurance Services
==================

Business logic for service standard assessments.

Services:
- ReferenceResolver: Active project/standard/profession lookups
- AssessmentValidator: Status and referential checks
- HistoryRecorder: Append-only audit trail
- AssessmentHandler: Create-or-update with history
- StandardsSummaryService: Per-standard roll-up of a project

Version: 0.1.0
"""

from services.assurance.services.handler import AssessmentHandler
from services.assurance.services.history import HistoryRecorder, compute_changes
from services.assurance.services.locks import KeyedLock
from services.assurance.services.resolver import ReferenceResolver
from services.assurance.services.summary import (
    NOT_UPDATED,
    StandardsSummaryService,
    aggregate_status,
)
from services.assurance.services.validator import AssessmentResult, AssessmentValidator


__all__ = [
    # Resolution and validation
    "ReferenceResolver",
    "AssessmentValidator",
    "AssessmentResult",
    # Writes
    "AssessmentHandler",
    "HistoryRecorder",
    "KeyedLock",
    "compute_changes",
    # Summary
    "StandardsSummaryService",
    "aggregate_status",
    "NOT_UPDATED",
]
