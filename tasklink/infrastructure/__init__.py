"""Infrastructure Layer: database session management and logging setup.

Invariants:
    - Infrastructure never imports from services/ or api/
    - Only core/errors.py is imported from core (error mapping)
"""
