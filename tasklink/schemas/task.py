"""Task Schemas: request body and rendered document for /tasks.

Invariants:
    - TaskWrite.assigned_user is None when omitted, "" when explicitly cleared
    - TaskWrite.assigned_user_name is None when omitted; when present it is
      only cross-checked, never stored verbatim
    - deadline renders as ISO-8601 in UTC
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class TaskWrite(BaseModel):
    """Body of POST /tasks and PUT /tasks/{id}."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    description: str = ""
    deadline: datetime | None = None
    completed: bool = False
    assigned_user: str | None = Field(None, alias="assignedUser")
    assigned_user_name: str | None = Field(None, alias="assignedUserName")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("assigned_user")
    @classmethod
    def strip_assigned_user(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else None

    @field_validator("deadline")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class TaskDocument(BaseModel):
    """Public shape of a task."""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(serialization_alias="_id")
    name: str
    description: str = ""
    deadline: datetime
    completed: bool = False
    assigned_user: str = Field("", serialization_alias="assignedUser")
    assigned_user_name: str = Field(
        "unassigned", serialization_alias="assignedUserName",
    )

    @field_serializer("deadline")
    def serialize_deadline(self, value: datetime) -> str:
        # SQLite hands back naive datetimes; they were stored as UTC
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")

    def render(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
