"""
Catalog Backend: Application Package Initializer
=================================================

What: Marks the `catalog` directory as a Python package.
Who:  Used by uvicorn (`catalog.main:app`), Alembic, pytest and the seed script.

Architecture Note:
    The backend is split into thin layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Catalog + Image logic)  │  ← ORM calls, image pipeline
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Every collaborator (database handle, resizer, image pipeline, services)
    is built by `catalog.main.create_app` and handed to routes through
    FastAPI dependencies, so each layer can be swapped in tests.
"""

__version__ = "1.0.0"
