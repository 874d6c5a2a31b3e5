"""
Assurance Services
==================

Services of the project assurance platform.

Services:
- assurance: Service standard assessments and their history
"""

__all__ = [
    "assurance",
]
