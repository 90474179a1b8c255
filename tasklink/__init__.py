"""TaskLink: users and tasks with hand-maintained two-way references.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
