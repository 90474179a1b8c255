"""Route Modules: one file per resource.

Invariants:
    - Each module defines its own APIRouter with tags (resource routers also carry a prefix)
    - Routes never contain relationship logic (delegate to services/)

Design Decisions:
    - Explicit registration in main.py over auto-discovery (ADR: ExMA anti-pattern)
"""
