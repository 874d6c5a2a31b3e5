"""
Database Module
===============

Async MongoDB access for the assurance service.

Usage:
    from shared.database import MongoDBClient, ASSESSMENTS

    db = MongoDBClient.get_database()
    doc = await db[ASSESSMENTS].find_one({"projectId": project_id})
"""

from shared.database.mongodb import (
    ASSESSMENT_HISTORY,
    ASSESSMENTS,
    PROFESSIONS,
    PROJECTS,
    SERVICE_STANDARDS,
    MongoDBClient,
)


__all__ = [
    "MongoDBClient",
    # Collections
    "PROJECTS",
    "SERVICE_STANDARDS",
    "PROFESSIONS",
    "ASSESSMENTS",
    "ASSESSMENT_HISTORY",
]
