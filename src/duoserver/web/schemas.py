# src/duoserver/web/schemas.py

"""Request bodies accepted by the HTTP surface."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError

M = TypeVar("M", bound=BaseModel)


class SubmissionIn(BaseModel):
    # All four fields required, nothing else allowed.
    model_config = ConfigDict(extra="forbid", strict=True)

    filename: str = Field(min_length=1)
    typed: str
    pasted: str
    real: str


class CheckMeIn(BaseModel):
    project_id: str = ""
    task_id: str = ""


class StreakIn(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    current_streak: int = Field(ge=0)
    last_completed: str
    streak_freeze: int = Field(ge=0)


def parse_body(model: type[M], data: Any) -> M:
    """Validate decoded JSON against `model`, mapping pydantic errors to ValidationError."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        parts = []
        for err in e.errors():
            loc = ".".join(str(x) for x in err.get("loc", ())) or "body"
            parts.append(f"{loc}: {err.get('msg', 'invalid')}")
        raise ValidationError("; ".join(parts)) from e
