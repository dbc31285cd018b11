"""Category schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, computed_field, model_validator
from pydantic_core import PydanticCustomError

from leaderboard_backend.models.leaderboard import RunType, SortDirection
from leaderboard_backend.schemas.common import Status, status_of
from leaderboard_backend.utils.validators import Slug


class CreateCategoryRequest(BaseModel):
    name: str = Field(..., min_length=1)
    slug: Slug
    info: str = ""
    sort_direction: SortDirection
    type: RunType


class UpdateCategoryRequest(BaseModel):
    """Partial update; the run type of a category is fixed once created"""
    name: Optional[str] = Field(None, min_length=1)
    slug: Optional[Slug] = None
    info: Optional[str] = None
    sort_direction: Optional[SortDirection] = None
    status: Optional[Status] = None

    class Config:
        extra = "forbid"

    @model_validator(mode="after")
    def check_not_empty(self):
        if all(getattr(self, field) is None for field in type(self).model_fields):
            raise PydanticCustomError("empty_update", "At least one field must be provided")
        return self


class CategoryView(BaseModel):
    id: int
    leaderboard_id: int
    name: str
    slug: str
    info: str
    sort_direction: SortDirection
    type: RunType
    created_at: datetime
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @computed_field
    @property
    def status(self) -> Status:
        return status_of(self.deleted_at)
