"""
Koalab Backend: Application Package
====================================

Authenticated CRUD backend for a collaborative whiteboard: boards and sticky
notes ("postits") behind a Persona-style sign-in and a signed session cookie.

    ┌─────────────────────────────────────┐
    │     Routes + Session Gate (API)     │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (codec, verifier, board) │
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │    Store adapter / Database layer   │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
