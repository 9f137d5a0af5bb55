"""
Arduino Relay - Application Package Initializer
================================================

What: Marks the `relay` directory as a Python package.
Why:  Enables module imports like `from relay.config import Settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The relay is deliberately thin, but keeps the same layering as a larger
    service so each piece can be tested on its own:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │       Services (Data Sink)          │  ← Firebase write, result type
    ├─────────────────────────────────────┤
    │          Schemas (Contract)         │  ← Pydantic response models
    └─────────────────────────────────────┘

    Routes never talk to firebase_admin directly. They receive a DataSink
    through FastAPI's dependency injection and branch on its WriteResult.
"""

__version__ = "1.0.0"
