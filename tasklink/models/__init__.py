"""ORM Models: SQLAlchemy declarative models for users and tasks.

Invariants:
    - All models inherit from Base (db/base.py)
    - No relationship() or ForeignKey between the two tables

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete for create_all and alembic
"""

from tasklink.models.user import User  # noqa: F401
from tasklink.models.task import Task  # noqa: F401
