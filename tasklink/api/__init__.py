"""API Layer: FastAPI routers, shared route helpers, and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Every response body is the {message, data} envelope (204 has no body)

Design Decisions:
    - Thin routes delegate to services/ operations (ADR: ExMA impureim sandwich)
"""
