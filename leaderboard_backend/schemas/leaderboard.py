"""Leaderboard schemas"""

import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from leaderboard_backend.schemas.category import CategoryView
from leaderboard_backend.schemas.common import Status, status_of
from leaderboard_backend.utils.validators import Slug


class LeaderboardSortBy(str, enum.Enum):
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    CREATED_AT_ASC = "created_at_asc"
    CREATED_AT_DESC = "created_at_desc"


class CreateLeaderboardRequest(BaseModel):
    name: str = Field(..., min_length=1)
    slug: Slug
    info: str = ""


class UpdateLeaderboardRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    slug: Optional[Slug] = None
    info: Optional[str] = None
    status: Optional[Status] = None

    class Config:
        extra = "forbid"

    @model_validator(mode="after")
    def check_not_empty(self):
        if all(getattr(self, field) is None for field in type(self).model_fields):
            raise PydanticCustomError("empty_update", "At least one field must be provided")
        return self


class LeaderboardView(BaseModel):
    id: int
    name: str
    slug: str
    info: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    categories: List[CategoryView] = []

    class Config:
        from_attributes = True

    @field_validator("categories", mode="before")
    @classmethod
    def live_categories_only(cls, v):
        return [c for c in v if getattr(c, "deleted_at", None) is None]

    @computed_field
    @property
    def status(self) -> Status:
        return status_of(self.deleted_at)
