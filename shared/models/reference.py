"""
Reference Models
================

Projects, service standards and professions. These catalogues are
owned elsewhere; assessments only read them.

Version: 0.1.0
"""

from datetime import datetime

from pydantic import Field

from shared.models.common import CamelModel, utc_now


class Project(CamelModel):
    """A software delivery project under assurance."""

    id: str
    name: str
    phase: str | None = None
    tags: list[str] = Field(default_factory=list)


class SoftDeletable(CamelModel):
    """Catalogue entry that can be hidden without being removed."""

    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    deleted_at: datetime | None = None
    deleted_by: str | None = None


class ServiceStandard(SoftDeletable):
    """One standard of the service standard catalogue."""

    id: str
    number: int
    name: str
    description: str = ""


class Profession(SoftDeletable):
    """A profession that scores standards (e.g. delivery, architecture)."""

    id: str
    name: str
    description: str = ""
