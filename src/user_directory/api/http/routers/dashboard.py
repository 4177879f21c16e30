"""Dashboard endpoint: one page of users plus the latest unread notifications."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from src.user_directory.api.http.deps import get_user_directory
from src.user_directory.core.repositories.user_directory import (
    DashboardData,
    UserDirectoryRepository,
)

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardData)
async def dashboard(
    user_directory: Annotated[UserDirectoryRepository, Depends(get_user_directory)],
    search: Annotated[str | None, Query(max_length=255)] = None,
    per_page: int | None = None,
    page: int = 1,
) -> DashboardData:
    """Never fails on read errors: an empty page is returned instead."""
    return await user_directory.get_dashboard_data(search, per_page, page)
