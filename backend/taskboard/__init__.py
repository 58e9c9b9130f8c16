"""
Taskboard Backend — Application Package Initializer
====================================================

What: Marks the `taskboard` directory as a Python package.
Who:  Imported by uvicorn (`taskboard.main:app`), Alembic, and pytest.

Architecture Note:
    The backend is layered so that the persistence core never knows about HTTP:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      Services (Orchestration)       │  ← transactions + audit trail
    ├─────────────────────────────────────┤
    │   Repositories (Persistence Core)   │  ← CRUD, recycle bin, audit log
    ├─────────────────────────────────────┤
    │  Execution Context (pool | txn)     │  ← one query surface, two modes
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
