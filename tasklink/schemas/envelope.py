"""Response Envelope: every JSON body is {"message": str, "data": T | null}."""

from typing import Any

from pydantic import BaseModel


class Envelope(BaseModel):
    message: str
    data: Any = None


def envelope(message: str, data: Any = None) -> dict:
    return Envelope(message=message, data=data).model_dump()
