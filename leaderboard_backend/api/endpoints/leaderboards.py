"""
Leaderboard endpoints
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from leaderboard_backend.api.deps import parse_id
from leaderboard_backend.core.database import get_db
from leaderboard_backend.core.security import require_admin
from leaderboard_backend.schemas.common import ListView, Page, StatusFilter, page_params
from leaderboard_backend.schemas.leaderboard import (
    CreateLeaderboardRequest,
    LeaderboardSortBy,
    LeaderboardView,
    UpdateLeaderboardRequest,
)
from leaderboard_backend.services.leaderboards import leaderboard_service

router = APIRouter()


@router.get("/api/leaderboards", response_model=ListView[LeaderboardView])
async def list_leaderboards(
    status_filter: StatusFilter = Query(StatusFilter.PUBLISHED, alias="status"),
    sort_by: LeaderboardSortBy = Query(LeaderboardSortBy.NAME_ASC),
    page: Page = Depends(page_params),
    db: Session = Depends(get_db),
):
    """List leaderboards"""
    items, total = leaderboard_service.list_leaderboards(db, status_filter, page, sort_by)
    return ListView[LeaderboardView](data=[LeaderboardView.model_validate(item) for item in items], total=total)


@router.get("/api/leaderboards/search", response_model=ListView[LeaderboardView])
async def search_leaderboards(
    q: str = Query(..., min_length=1),
    status_filter: StatusFilter = Query(StatusFilter.PUBLISHED, alias="status"),
    page: Page = Depends(page_params),
    db: Session = Depends(get_db),
):
    """Search leaderboards by name or slug"""
    items, total = leaderboard_service.search_leaderboards(db, q, status_filter, page)
    return ListView[LeaderboardView](data=[LeaderboardView.model_validate(item) for item in items], total=total)


@router.get("/api/leaderboards/{leaderboard_id}", response_model=LeaderboardView)
async def get_leaderboard(leaderboard_id: str, db: Session = Depends(get_db)):
    """Get leaderboard by ID"""
    return leaderboard_service.get_leaderboard(db, parse_id(leaderboard_id))


@router.get("/api/leaderboard", response_model=LeaderboardView)
async def get_leaderboard_by_slug(slug: str, db: Session = Depends(get_db)):
    """Get a live leaderboard by its slug"""
    return leaderboard_service.get_leaderboard_by_slug(db, slug)


@router.post(
    "/leaderboards",
    response_model=LeaderboardView,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_leaderboard(request: CreateLeaderboardRequest, db: Session = Depends(get_db)):
    """Create a leaderboard"""
    return leaderboard_service.create_leaderboard(db, request)


@router.patch(
    "/leaderboards/{leaderboard_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def update_leaderboard(
    leaderboard_id: str, request: UpdateLeaderboardRequest, db: Session = Depends(get_db)
):
    """Update a leaderboard"""
    leaderboard_service.update_leaderboard(db, parse_id(leaderboard_id), request)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/leaderboards/{leaderboard_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_leaderboard(leaderboard_id: str, db: Session = Depends(get_db)):
    """Delete a leaderboard"""
    leaderboard_service.delete_leaderboard(db, parse_id(leaderboard_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/leaderboards/{leaderboard_id}/restore",
    response_model=LeaderboardView,
    dependencies=[Depends(require_admin)],
)
async def restore_leaderboard(leaderboard_id: str, db: Session = Depends(get_db)):
    """Restore a deleted leaderboard"""
    return leaderboard_service.restore_leaderboard(db, parse_id(leaderboard_id))
