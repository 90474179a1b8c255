"""User Schemas: request body and rendered document for /users.

Invariants:
    - UserWrite.name is stripped; UserWrite.email is stripped and lower-cased
    - UserWrite.pending_tasks is None when the caller omitted pendingTasks
      (update keeps the current list), [] when the caller sent an empty list
    - UserDocument renders exactly _id, name, email, pendingTasks
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tasklink.core.domain_types import normalize_email


class UserWrite(BaseModel):
    """Body of POST /users and PUT /users/{id}."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    email: str = ""
    pending_tasks: list[str] | None = Field(None, alias="pendingTasks")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("email")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_email(v)


class UserDocument(BaseModel):
    """Public shape of a user."""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(serialization_alias="_id")
    name: str
    email: str
    pending_tasks: list[str] = Field(
        default_factory=list, serialization_alias="pendingTasks",
    )

    def render(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
