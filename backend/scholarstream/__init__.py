"""
Scholar Stream Backend: Application Package Initializer
========================================================

What: Marks the `scholarstream` directory as a Python package.
Who:  Used by uvicorn (`scholarstream.main:app`), pytest and the route modules.

Architecture Note:
    ┌─────────────────────────────────────┐
    │   Routes + Auth Guards (API Layer)  │  ← HTTP concerns, role checks
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← per-resource operations
    ├─────────────────────────────────────┤
    │           Schemas (Pydantic)        │  ← request/response contracts
    ├─────────────────────────────────────┤
    │      Database (MongoDB via pymongo) │  ← collections, id parsing
    └─────────────────────────────────────┘

    Routes never touch collections directly; services never see HTTP objects.
"""

__version__ = "1.0.0"
