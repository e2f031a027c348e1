"""
NoteMe Backend — Application Package Initializer
=================================================

What: Marks the `noteme` directory as a Python package.
Why:  Enables module imports like `from noteme.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest, uvicorn
      and the `noteme-build` console script.

Architecture Note:
    The backend follows the same layered split for the API and the site builder:

    ┌─────────────────────────────────────┐
    │      Routes (API) / Site builder    │  ← HTTP or file-output concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, id assignment, hooks
    ├─────────────────────────────────────┤
    │        Schemas (Data Model)         │  ← Pydantic Document / User / Note
    ├─────────────────────────────────────┤
    │     Document Store (Persistence)    │  ← One JSON document (JSONBin / file)
    └─────────────────────────────────────┘

    All persisted state is ONE JSON document. Every mutation reads the whole
    document, changes it in memory and writes the whole document back.
"""

__version__ = "1.0.0"
