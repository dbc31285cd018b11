"""Shared schemas: lifecycle status, paging and list envelopes"""

import enum
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from fastapi import Query
from pydantic import BaseModel

T = TypeVar("T")

LIMIT_DEFAULT = 64
LIMIT_MAX = 1024


class Status(str, enum.Enum):
    PUBLISHED = "published"
    DELETED = "deleted"


class StatusFilter(str, enum.Enum):
    PUBLISHED = "published"
    DELETED = "deleted"
    ANY = "any"


def status_of(deleted_at: Optional[datetime]) -> Status:
    return Status.DELETED if deleted_at is not None else Status.PUBLISHED


class Page(BaseModel):
    """A window over a list; limit is already clamped"""
    limit: int
    offset: int


def page_params(
    limit: Optional[int] = Query(None, ge=0),
    offset: int = Query(0, ge=0),
) -> Page:
    """Query dependency; a missing limit takes the default and a large one is clamped"""
    if limit is None:
        limit = LIMIT_DEFAULT
    return Page(limit=min(limit, LIMIT_MAX), offset=offset)


class ListView(BaseModel, Generic[T]):
    data: List[T]
    total: int
    limit_default: int = LIMIT_DEFAULT
    limit_max: int = LIMIT_MAX
