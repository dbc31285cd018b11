"""
Helpers shared by soft-deletable resources
Status filtering, paging and turning unique index violations into conflicts
"""

import logging
from typing import Callable, List, Optional, Tuple, Type

from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from leaderboard_backend.core.database import Base, is_unique_violation
from leaderboard_backend.core.exceptions import ConflictException
from leaderboard_backend.schemas.common import Page, StatusFilter

logger = logging.getLogger(__name__)


def filter_status(stmt: Select, model, status: StatusFilter) -> Select:
    """Restrict a query on a soft-deletable model to the requested lifecycle state"""
    if status == StatusFilter.PUBLISHED:
        return stmt.where(model.deleted_at.is_(None))
    if status == StatusFilter.DELETED:
        return stmt.where(model.deleted_at.is_not(None))
    return stmt


def paginate(db: Session, stmt: Select, page: Page) -> Tuple[List, int]:
    """Run a query for one page and count the rows of the whole result"""
    total = db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    items = db.scalars(stmt.limit(page.limit).offset(page.offset)).all()
    return list(items), total


def commit_or_conflict(
    db: Session,
    find_conflicting: Callable[[], Optional[Base]],
    view: Type[BaseModel],
) -> None:
    """
    Commit pending changes; a unique index violation becomes a ConflictException

    The session is rolled back first, so the rejected row keeps its stored values.
    ``find_conflicting`` must not read from the rejected row.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if not is_unique_violation(e):
            raise

        conflicting = find_conflicting()
        if conflicting is None:
            # The other row went away between the failed write and the lookup
            logger.warning("Unique violation without a live conflicting row")
            raise

        raise ConflictException(view.model_validate(conflicting).model_dump(mode="json"))
