"""
Run endpoints
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from leaderboard_backend.api.deps import parse_id, parse_uuid
from leaderboard_backend.core.database import get_db
from leaderboard_backend.core.exceptions import NotFoundException
from leaderboard_backend.core.security import require_admin, require_not_banned, require_run_submitter
from leaderboard_backend.models.user import User
from leaderboard_backend.schemas.category import CategoryView
from leaderboard_backend.schemas.common import ListView, Page, StatusFilter, page_params
from leaderboard_backend.schemas.run import CreateRunRequest, RunView, UpdateRunRequest
from leaderboard_backend.services.runs import run_service

router = APIRouter()


@router.get("/api/runs/{run_id}", response_model=RunView)
async def get_run(run_id: str, db: Session = Depends(get_db)):
    """Get run by ID"""
    return run_service.get_run(db, parse_uuid(run_id))


@router.get("/api/runs/{run_id}/category", response_model=CategoryView)
async def get_run_category(run_id: str, db: Session = Depends(get_db)):
    """Get the category a run was submitted to"""
    return run_service.get_run(db, parse_uuid(run_id)).category


@router.get("/api/categories/{category_id}/runs", response_model=ListView[RunView])
async def list_runs(
    category_id: str,
    status_filter: StatusFilter = Query(StatusFilter.PUBLISHED, alias="status"),
    page: Page = Depends(page_params),
    db: Session = Depends(get_db),
):
    """List the runs of a category, best first"""
    items, total = run_service.list_runs(db, parse_id(category_id), status_filter, page)
    return ListView[RunView](data=[RunView.model_validate(item) for item in items], total=total)


@router.post(
    "/categories/{category_id}/runs",
    response_model=RunView,
    status_code=status.HTTP_201_CREATED,
)
async def create_run(
    category_id: str,
    request: CreateRunRequest,
    current_user: User = Depends(require_run_submitter),
    db: Session = Depends(get_db),
):
    """Submit a run"""
    try:
        parsed_id = parse_id(category_id)
    except NotFoundException:
        raise NotFoundException("Category Not Found")
    return run_service.create_run(db, parsed_id, request, current_user)


@router.patch("/runs/{run_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_run(
    run_id: str,
    request: UpdateRunRequest,
    current_user: User = Depends(require_not_banned),
    db: Session = Depends(get_db),
):
    """Update a run; only its submitter or an administrator may"""
    run_service.update_run(db, parse_uuid(run_id), request, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/runs/{run_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_run(run_id: str, db: Session = Depends(get_db)):
    """Delete a run"""
    run_service.delete_run(db, parse_uuid(run_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
