"""
Assurance Service
=================

Per-profession service standard assessments for delivery projects.

Features:
- Create-or-update of the current assessment per project, standard and profession
- Validation of ratings and referenced catalogue entries
- Append-only assessment history with archiving
- Per-standard project summaries

Port: 8010
"""

__version__ = "0.1.0"
