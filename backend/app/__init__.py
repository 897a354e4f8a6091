"""
Notes API — Application Package Initializer
=============================================

What: Marks the `app` directory as a Python package.
Who:  Used by uvicorn (app.main:app), pytest and the `notes-api` console script.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, orchestration
    ├─────────────────────────────────────┤
    │            Schemas (Data)           │  ← Pydantic API contracts
    ├─────────────────────────────────────┤
    │       Database (Persistence)        │  ← NoteGateway over MongoDB
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
