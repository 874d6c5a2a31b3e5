"""
Assurance Test Suite
====================

Test organization:
- tests/unit/               - Shared library tests (no external dependencies)
- tests/services/assurance/ - Assurance service tests (in-memory storage, mocked MongoDB)

Run tests:
    pytest                          # All tests
    pytest tests/unit               # Unit tests only
"""
