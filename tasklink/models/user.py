"""User ORM: a person who can own pending tasks.

Invariants:
    - id is an application-generated UUID string (primary key)
    - email is stored trimmed and lower-cased; unique index backs the duplicate check
    - Free-text columns are unbounded Text: any non-empty string is a valid name or email
    - pending_tasks holds Task ids of uncompleted tasks whose assigned_user is this user

Design Decisions:
    - JSON column for pending_tasks, no association table or foreign key: the
      relationship is maintained by services/, not by the database (ADR: document-store semantics)
    - pending_tasks is always reassigned, never mutated in place (plain JSON is not change-tracked)
"""

import uuid

from sqlalchemy import String, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column

from tasklink.db.base import Base


class User(Base):
    """User document."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(
        Text, nullable=False, unique=True, index=True,
    )
    pending_tasks: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
