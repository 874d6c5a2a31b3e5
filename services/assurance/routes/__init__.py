"""
Assurance Routes
================

API route handlers for the Assurance Service.
"""

from services.assurance.routes import assessments


__all__ = ["assessments"]
