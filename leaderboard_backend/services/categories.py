"""Category service"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from leaderboard_backend.core.database import session_now
from leaderboard_backend.core.exceptions import (
    AlreadyDeletedException,
    NotDeletedException,
    NotFoundException,
)
from leaderboard_backend.core.logging import LoggerFactory
from leaderboard_backend.models.leaderboard import Category, Leaderboard
from leaderboard_backend.schemas.category import (
    CategoryView,
    CreateCategoryRequest,
    UpdateCategoryRequest,
)
from leaderboard_backend.schemas.common import Page, Status, StatusFilter
from leaderboard_backend.services.lifecycle import commit_or_conflict, filter_status, paginate

logger = logging.getLogger(__name__)
audit_logger = LoggerFactory.get_audit_logger()


def _live_by_slug(db: Session, leaderboard_id: int, slug: str) -> Optional[Category]:
    return db.scalar(
        select(Category).where(
            Category.leaderboard_id == leaderboard_id,
            Category.slug == slug,
            Category.deleted_at.is_(None),
        )
    )


def _require_leaderboard(db: Session, leaderboard_id: int) -> Leaderboard:
    leaderboard = db.get(Leaderboard, leaderboard_id)
    if leaderboard is None:
        raise NotFoundException("Leaderboard Not Found")
    return leaderboard


class CategoryService:
    @staticmethod
    def get_category(db: Session, category_id: int) -> Category:
        """Get a category by ID, deleted or not"""
        category = db.get(Category, category_id)
        if category is None:
            raise NotFoundException()
        return category

    @staticmethod
    def get_category_by_slug(db: Session, leaderboard_id: int, slug: str) -> Category:
        """Get the live category holding a slug within a leaderboard"""
        category = _live_by_slug(db, leaderboard_id, slug)
        if category is None:
            raise NotFoundException()
        return category

    @staticmethod
    def list_categories(
        db: Session, leaderboard_id: int, status: StatusFilter, page: Page
    ) -> Tuple[List[Category], int]:
        """
        List the categories of a leaderboard

        Raises:
            NotFoundException: Unknown leaderboard
        """
        _require_leaderboard(db, leaderboard_id)

        stmt = select(Category).where(Category.leaderboard_id == leaderboard_id)
        stmt = filter_status(stmt, Category, status).order_by(Category.id)
        return paginate(db, stmt, page)

    @staticmethod
    def create_category(
        db: Session, leaderboard_id: int, request: CreateCategoryRequest
    ) -> Category:
        """
        Create a category in a leaderboard

        Raises:
            NotFoundException: Unknown leaderboard
            ConflictException: A live category of the leaderboard already holds the slug
        """
        _require_leaderboard(db, leaderboard_id)

        category = Category(
            leaderboard_id=leaderboard_id,
            name=request.name,
            slug=request.slug,
            info=request.info,
            sort_direction=request.sort_direction,
            type=request.type,
        )
        db.add(category)

        commit_or_conflict(
            db, lambda: _live_by_slug(db, leaderboard_id, request.slug), CategoryView
        )

        logger.info(f"Created category {category.id} in leaderboard {leaderboard_id}")
        return category

    @staticmethod
    def update_category(db: Session, category_id: int, request: UpdateCategoryRequest) -> None:
        """
        Apply a partial update; a status change deletes or restores

        Raises:
            NotFoundException: Unknown category
            ConflictException: The resulting live slug is already taken in the leaderboard
        """
        category = CategoryService.get_category(db, category_id)

        if request.name is not None:
            category.name = request.name
        if request.slug is not None:
            category.slug = request.slug
        if request.info is not None:
            category.info = request.info
        if request.sort_direction is not None:
            category.sort_direction = request.sort_direction

        if request.status == Status.PUBLISHED:
            category.deleted_at = None
        elif request.status == Status.DELETED and category.deleted_at is None:
            category.deleted_at = session_now(db)

        leaderboard_id, slug = category.leaderboard_id, category.slug
        commit_or_conflict(db, lambda: _live_by_slug(db, leaderboard_id, slug), CategoryView)

    @staticmethod
    def delete_category(db: Session, category_id: int) -> None:
        """
        Soft-delete a category

        Raises:
            NotFoundException: Unknown category
            AlreadyDeletedException: The category is already deleted
        """
        category = CategoryService.get_category(db, category_id)
        if category.deleted_at is not None:
            raise AlreadyDeletedException()

        category.deleted_at = session_now(db)
        db.commit()

        audit_logger.info(f"Deleted category {category.id} ({category.slug})")

    @staticmethod
    def restore_category(db: Session, category_id: int) -> Category:
        """
        Bring a deleted category back

        Raises:
            NotFoundException: Unknown category
            NotDeletedException: The category was not deleted
            ConflictException: A live category of the leaderboard now holds the slug
        """
        category = CategoryService.get_category(db, category_id)
        if category.deleted_at is None:
            raise NotDeletedException()

        leaderboard_id, slug = category.leaderboard_id, category.slug
        category.deleted_at = None
        commit_or_conflict(db, lambda: _live_by_slug(db, leaderboard_id, slug), CategoryView)

        audit_logger.info(f"Restored category {category.id} ({category.slug})")
        return category


category_service = CategoryService()
