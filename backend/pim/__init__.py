"""
PIM Backend — Application Package Initializer
==============================================

What: Marks the `pim` directory as a Python package.
Who:  Imported by uvicorn (`pim.main:app`), Alembic and pytest.

Architecture Note:
    The backend is layered the same way for every resource (notes, contacts, tasks):

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependency
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validation rules, status coupling
    ├─────────────────────────────────────┤
    │     OwnedRepository (Data Access)   │  ← userId-scoped CRUD
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← engine + sessions owned by the app
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
