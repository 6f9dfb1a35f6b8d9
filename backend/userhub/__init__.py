"""
UserHub Backend — Application Package Initializer
===================================================

What: REST API for managing users (list/search, create, edit, delete).

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, envelope
    ├─────────────────────────────────────┤
    │         Services (Data Access)      │  ← Query building, error mapping
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
