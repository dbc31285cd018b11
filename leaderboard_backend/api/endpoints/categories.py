"""
Category endpoints
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from leaderboard_backend.api.deps import parse_id
from leaderboard_backend.core.database import get_db
from leaderboard_backend.core.exceptions import NotFoundException
from leaderboard_backend.core.security import require_admin
from leaderboard_backend.schemas.category import (
    CategoryView,
    CreateCategoryRequest,
    UpdateCategoryRequest,
)
from leaderboard_backend.schemas.common import ListView, Page, StatusFilter, page_params
from leaderboard_backend.services.categories import category_service

router = APIRouter()


@router.get("/api/categories/{category_id}", response_model=CategoryView)
async def get_category(category_id: str, db: Session = Depends(get_db)):
    """Get category by ID"""
    return category_service.get_category(db, parse_id(category_id))


@router.get("/api/leaderboards/{leaderboard_id}/categories/{slug}", response_model=CategoryView)
async def get_category_by_slug(leaderboard_id: str, slug: str, db: Session = Depends(get_db)):
    """Get a live category of a leaderboard by its slug"""
    return category_service.get_category_by_slug(db, parse_id(leaderboard_id), slug)


@router.get("/api/leaderboards/{leaderboard_id}/categories", response_model=ListView[CategoryView])
async def list_categories(
    leaderboard_id: str,
    status_filter: StatusFilter = Query(StatusFilter.PUBLISHED, alias="status"),
    page: Page = Depends(page_params),
    db: Session = Depends(get_db),
):
    """List the categories of a leaderboard"""
    items, total = category_service.list_categories(db, parse_id(leaderboard_id), status_filter, page)
    return ListView[CategoryView](data=[CategoryView.model_validate(item) for item in items], total=total)


@router.post(
    "/leaderboards/{leaderboard_id}/categories",
    response_model=CategoryView,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_category(
    leaderboard_id: str, request: CreateCategoryRequest, db: Session = Depends(get_db)
):
    """Create a category in a leaderboard"""
    try:
        board_id = parse_id(leaderboard_id)
    except NotFoundException:
        raise NotFoundException("Leaderboard Not Found")
    return category_service.create_category(db, board_id, request)


@router.patch(
    "/categories/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def update_category(
    category_id: str, request: UpdateCategoryRequest, db: Session = Depends(get_db)
):
    """Update a category; setting status to published restores it"""
    category_service.update_category(db, parse_id(category_id), request)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/categories/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_category(category_id: str, db: Session = Depends(get_db)):
    """Delete a category"""
    category_service.delete_category(db, parse_id(category_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/categories/{category_id}/restore",
    response_model=CategoryView,
    dependencies=[Depends(require_admin)],
)
async def restore_category(category_id: str, db: Session = Depends(get_db)):
    """Restore a deleted category"""
    return category_service.restore_category(db, parse_id(category_id))
