"""Task ORM: a unit of work that may be assigned to one user.

Invariants:
    - assigned_user is "" (no owner) or a User id; there is no foreign key
    - assigned_user_name mirrors the owner's name, or "unassigned"
    - completed defaults to False, description to ""

Design Decisions:
    - assigned_user_name denormalized: list reads never join users
    - assigned_user indexed: cascades (user delete, rename) filter on it
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Text, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from tasklink.core.domain_types import NO_OWNER, UNASSIGNED_NAME
from tasklink.db.base import Base


class Task(Base):
    """Task document."""
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    deadline: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    assigned_user: Mapped[str] = mapped_column(
        String(36), nullable=False, default=NO_OWNER, index=True,
    )
    assigned_user_name: Mapped[str] = mapped_column(
        Text, nullable=False, default=UNASSIGNED_NAME,
    )
