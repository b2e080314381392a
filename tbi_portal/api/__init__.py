"""API Layer — FastAPI routes, dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Action endpoints return the service result envelope; HTTP status follows error_kind

Design Decisions:
    - Thin routes delegate to services (functional core, imperative shell)
"""
