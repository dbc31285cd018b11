"""Run schemas"""

import uuid
from datetime import date, datetime, timedelta
from typing import Optional

from pydantic import BaseModel, Field, computed_field, model_validator
from pydantic_core import PydanticCustomError

from leaderboard_backend.schemas.common import Status, status_of
from leaderboard_backend.utils.validators import BIGINT_MAX, Duration


class CreateRunRequest(BaseModel):
    """Exactly one of time or score, matching the category's run type"""
    info: str = ""
    played_on: date
    time: Optional[Duration] = None
    score: Optional[int] = Field(None, ge=0, le=BIGINT_MAX)


class UpdateRunRequest(BaseModel):
    info: Optional[str] = None
    played_on: Optional[date] = None
    time: Optional[Duration] = None
    score: Optional[int] = Field(None, ge=0, le=BIGINT_MAX)
    status: Optional[Status] = None

    class Config:
        extra = "forbid"

    @model_validator(mode="after")
    def check_not_empty(self):
        if all(getattr(self, field) is None for field in type(self).model_fields):
            raise PydanticCustomError("empty_update", "At least one field must be provided")
        return self


class RunView(BaseModel):
    id: uuid.UUID
    category_id: int
    user_id: uuid.UUID
    info: str
    played_on: date
    time: Optional[timedelta] = None
    score: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @computed_field
    @property
    def status(self) -> Status:
        return status_of(self.deleted_at)
