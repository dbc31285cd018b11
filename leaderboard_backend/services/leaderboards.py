"""Leaderboard service"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, literal, or_, select
from sqlalchemy.orm import Session

from leaderboard_backend.core.database import session_now
from leaderboard_backend.core.exceptions import (
    AlreadyDeletedException,
    NotDeletedException,
    NotFoundException,
)
from leaderboard_backend.core.logging import LoggerFactory
from leaderboard_backend.models.leaderboard import Leaderboard
from leaderboard_backend.schemas.common import Page, Status, StatusFilter
from leaderboard_backend.schemas.leaderboard import (
    CreateLeaderboardRequest,
    LeaderboardSortBy,
    LeaderboardView,
    UpdateLeaderboardRequest,
)
from leaderboard_backend.services.lifecycle import commit_or_conflict, filter_status, paginate

logger = logging.getLogger(__name__)
audit_logger = LoggerFactory.get_audit_logger()

SORT_ORDERS = {
    LeaderboardSortBy.NAME_ASC: (Leaderboard.name.asc(), Leaderboard.id.asc()),
    LeaderboardSortBy.NAME_DESC: (Leaderboard.name.desc(), Leaderboard.id.desc()),
    LeaderboardSortBy.CREATED_AT_ASC: (Leaderboard.created_at.asc(), Leaderboard.id.asc()),
    LeaderboardSortBy.CREATED_AT_DESC: (Leaderboard.created_at.desc(), Leaderboard.id.desc()),
}


def _live_by_slug(db: Session, slug: str) -> Optional[Leaderboard]:
    return db.scalar(
        select(Leaderboard).where(Leaderboard.slug == slug, Leaderboard.deleted_at.is_(None))
    )


class LeaderboardService:
    @staticmethod
    def get_leaderboard(db: Session, leaderboard_id: int) -> Leaderboard:
        """Get a leaderboard by ID, deleted or not"""
        leaderboard = db.get(Leaderboard, leaderboard_id)
        if leaderboard is None:
            raise NotFoundException()
        return leaderboard

    @staticmethod
    def get_leaderboard_by_slug(db: Session, slug: str) -> Leaderboard:
        """Get the live leaderboard holding a slug"""
        leaderboard = _live_by_slug(db, slug)
        if leaderboard is None:
            raise NotFoundException()
        return leaderboard

    @staticmethod
    def list_leaderboards(
        db: Session,
        status: StatusFilter,
        page: Page,
        sort_by: LeaderboardSortBy = LeaderboardSortBy.NAME_ASC,
    ) -> Tuple[List[Leaderboard], int]:
        stmt = filter_status(select(Leaderboard), Leaderboard, status)
        stmt = stmt.order_by(*SORT_ORDERS[sort_by])
        return paginate(db, stmt, page)

    @staticmethod
    def search_leaderboards(
        db: Session, query: str, status: StatusFilter, page: Page
    ) -> Tuple[List[Leaderboard], int]:
        """
        Find leaderboards whose name or slug matches a query

        PostgreSQL uses web search syntax ranked by relevance; other databases
        fall back to a case-insensitive substring match.
        """
        stmt = filter_status(select(Leaderboard), Leaderboard, status)

        if db.get_bind().dialect.name == "postgresql":
            document = func.to_tsvector(
                "simple", Leaderboard.name + literal(" ") + func.replace(Leaderboard.slug, "-", " ")
            )
            ts_query = func.websearch_to_tsquery("simple", query)
            stmt = stmt.where(document.bool_op("@@")(ts_query)).order_by(
                func.ts_rank(document, ts_query).desc(), Leaderboard.id
            )
        else:
            stmt = stmt.where(
                or_(
                    Leaderboard.name.icontains(query, autoescape=True),
                    Leaderboard.slug.icontains(query, autoescape=True),
                )
            ).order_by(Leaderboard.name, Leaderboard.id)

        return paginate(db, stmt, page)

    @staticmethod
    def create_leaderboard(db: Session, request: CreateLeaderboardRequest) -> Leaderboard:
        """
        Create a leaderboard

        Raises:
            ConflictException: A live leaderboard already holds the slug
        """
        leaderboard = Leaderboard(name=request.name, slug=request.slug, info=request.info)
        db.add(leaderboard)

        commit_or_conflict(db, lambda: _live_by_slug(db, request.slug), LeaderboardView)

        logger.info(f"Created leaderboard {leaderboard.id} ({leaderboard.slug})")
        return leaderboard

    @staticmethod
    def update_leaderboard(
        db: Session, leaderboard_id: int, request: UpdateLeaderboardRequest
    ) -> None:
        """
        Apply a partial update; a status change deletes or restores

        Raises:
            NotFoundException: Unknown leaderboard
            ConflictException: The resulting live slug is already taken
        """
        leaderboard = LeaderboardService.get_leaderboard(db, leaderboard_id)

        if request.name is not None:
            leaderboard.name = request.name
        if request.slug is not None:
            leaderboard.slug = request.slug
        if request.info is not None:
            leaderboard.info = request.info

        if request.status == Status.PUBLISHED:
            leaderboard.deleted_at = None
        elif request.status == Status.DELETED and leaderboard.deleted_at is None:
            leaderboard.deleted_at = session_now(db)

        slug = leaderboard.slug
        commit_or_conflict(db, lambda: _live_by_slug(db, slug), LeaderboardView)

    @staticmethod
    def delete_leaderboard(db: Session, leaderboard_id: int) -> None:
        """
        Soft-delete a leaderboard

        Raises:
            NotFoundException: Unknown leaderboard
            AlreadyDeletedException: The leaderboard is already deleted
        """
        leaderboard = LeaderboardService.get_leaderboard(db, leaderboard_id)
        if leaderboard.deleted_at is not None:
            raise AlreadyDeletedException()

        leaderboard.deleted_at = session_now(db)
        db.commit()

        audit_logger.info(f"Deleted leaderboard {leaderboard.id} ({leaderboard.slug})")

    @staticmethod
    def restore_leaderboard(db: Session, leaderboard_id: int) -> Leaderboard:
        """
        Bring a deleted leaderboard back

        Raises:
            NotFoundException: Unknown leaderboard
            NotDeletedException: The leaderboard was not deleted
            ConflictException: A live leaderboard now holds the slug
        """
        leaderboard = LeaderboardService.get_leaderboard(db, leaderboard_id)
        if leaderboard.deleted_at is None:
            raise NotDeletedException()

        slug = leaderboard.slug
        leaderboard.deleted_at = None
        commit_or_conflict(db, lambda: _live_by_slug(db, slug), LeaderboardView)

        audit_logger.info(f"Restored leaderboard {leaderboard.id} ({leaderboard.slug})")
        return leaderboard


leaderboard_service = LeaderboardService()
