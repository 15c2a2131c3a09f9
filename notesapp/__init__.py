"""
Notes Backend - Application Package Initializer
================================================

Architecture Note:
    This backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← auth flows, ownership rules
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes handle status codes and envelopes but delegate every decision to
    services, which can be tested without HTTP.
"""

__version__ = "1.0.0"
