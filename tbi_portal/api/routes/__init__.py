"""Route Modules — one file per resource.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes never contain business logic (delegate to services/)
    - Role gating happens in route dependencies (api/deps.py), never inside handlers

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
