"""Run service"""

import logging
import uuid
from datetime import timedelta
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from leaderboard_backend.core.database import session_now
from leaderboard_backend.core.exceptions import (
    AlreadyDeletedException,
    AuthorizationException,
    NotFoundException,
    ValidationException,
)
from leaderboard_backend.core.logging import LoggerFactory
from leaderboard_backend.models.leaderboard import Category, Run, RunType, SortDirection
from leaderboard_backend.models.user import User, UserRole
from leaderboard_backend.schemas.common import Page, Status, StatusFilter
from leaderboard_backend.schemas.run import CreateRunRequest, UpdateRunRequest
from leaderboard_backend.services.lifecycle import filter_status, paginate

logger = logging.getLogger(__name__)
audit_logger = LoggerFactory.get_audit_logger()


def _check_metric(category: Category, time: Optional[timedelta], score: Optional[int]) -> None:
    """The metric supplied must be the one the category ranks on"""
    if category.type == RunType.TIME:
        ok, field = time is not None and score is None, "time"
    else:
        ok, field = score is not None and time is None, "score"

    if not ok:
        raise ValidationException(
            [
                {
                    "field": field,
                    "message": f"Runs in this category must have a {field} and nothing else",
                    "type": "bad_run_type",
                }
            ]
        )


class RunService:
    @staticmethod
    def get_run(db: Session, run_id: uuid.UUID) -> Run:
        """Get a run by ID, deleted or not"""
        run = db.get(Run, run_id)
        if run is None:
            raise NotFoundException()
        return run

    @staticmethod
    def list_runs(
        db: Session, category_id: int, status: StatusFilter, page: Page
    ) -> Tuple[List[Run], int]:
        """
        List the runs of a category, best first

        Runs are ranked on the category's metric in its sort direction; ties
        go to the earlier submission.

        Raises:
            NotFoundException: Unknown category
        """
        category = db.get(Category, category_id)
        if category is None:
            raise NotFoundException("Category Not Found")

        metric = Run.time if category.type == RunType.TIME else Run.score
        metric_order = metric.asc() if category.sort_direction == SortDirection.ASCENDING else metric.desc()

        stmt = select(Run).where(Run.category_id == category_id)
        stmt = filter_status(stmt, Run, status).order_by(metric_order, Run.created_at, Run.id)
        return paginate(db, stmt, page)

    @staticmethod
    def create_run(db: Session, category_id: int, request: CreateRunRequest, user: User) -> Run:
        """
        Submit a run to a live category on behalf of a user

        Raises:
            NotFoundException: Unknown or deleted category
            ValidationException: The metric does not match the category type
        """
        category = db.get(Category, category_id)
        if category is None or category.deleted_at is not None:
            raise NotFoundException("Category Not Found")

        _check_metric(category, request.time, request.score)

        run = Run(
            category_id=category.id,
            user_id=user.id,
            info=request.info,
            played_on=request.played_on,
            time=request.time,
            score=request.score,
        )
        db.add(run)
        db.commit()

        logger.info(f"User {user.id} submitted run {run.id} to category {category.id}")
        return run

    @staticmethod
    def update_run(db: Session, run_id: uuid.UUID, request: UpdateRunRequest, user: User) -> None:
        """
        Apply a partial update to a run

        Raises:
            NotFoundException: Unknown run
            AuthorizationException: The user neither owns the run nor administers
            ValidationException: The metric does not match the category type
        """
        run = RunService.get_run(db, run_id)

        if run.user_id != user.id and user.role != UserRole.ADMINISTRATOR:
            raise AuthorizationException()

        if request.time is not None or request.score is not None:
            _check_metric(run.category, request.time, request.score)
            run.time = request.time
            run.score = request.score

        if request.info is not None:
            run.info = request.info
        if request.played_on is not None:
            run.played_on = request.played_on

        if request.status == Status.PUBLISHED:
            run.deleted_at = None
        elif request.status == Status.DELETED and run.deleted_at is None:
            run.deleted_at = session_now(db)

        db.commit()

    @staticmethod
    def delete_run(db: Session, run_id: uuid.UUID) -> None:
        """
        Soft-delete a run

        Raises:
            NotFoundException: Unknown run
            AlreadyDeletedException: The run is already deleted
        """
        run = RunService.get_run(db, run_id)
        if run.deleted_at is not None:
            raise AlreadyDeletedException()

        run.deleted_at = session_now(db)
        db.commit()

        audit_logger.info(f"Deleted run {run.id}")


run_service = RunService()
