"""User search and mutation endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from src.user_directory.api.http.deps import get_search_service, get_user_directory
from src.user_directory.core.exceptions import OperationFailedError
from src.user_directory.core.repositories.user_directory import UserDirectoryRepository
from src.user_directory.core.services.search.search_service import UserSearchService
from src.user_directory.entities.core.user.entity import User, UserCreate

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/search", response_model=list[User])
async def search_users(
    search_service: Annotated[UserSearchService, Depends(get_search_service)],
    search: Annotated[str | None, Query(max_length=255)] = None,
    limit: int | None = None,
) -> list[User]:
    """Best-effort: a storage failure yields an empty list."""
    try:
        return await search_service.search_collection(search, limit)
    except OperationFailedError:
        return []


@router.post("/cache/clear")
async def clear_search_cache(
    search_service: Annotated[UserSearchService, Depends(get_search_service)],
    search: str | None = None,
) -> dict[str, bool]:
    """Best-effort: reports whether anything was flushed, never fails."""
    return {"cleared": await search_service.clear_cache(search)}


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: int,
    user_directory: Annotated[UserDirectoryRepository, Depends(get_user_directory)],
) -> User:
    return user_directory.get_user(user_id)


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    user_directory: Annotated[UserDirectoryRepository, Depends(get_user_directory)],
) -> User:
    return await user_directory.create_with_address(payload, payload.address)


@router.put("/{user_id}", response_model=User)
async def update_user(
    user_id: int,
    payload: UserCreate,
    user_directory: Annotated[UserDirectoryRepository, Depends(get_user_directory)],
) -> User:
    return await user_directory.update_with_address(user_id, payload, payload.address)


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    user_directory: Annotated[UserDirectoryRepository, Depends(get_user_directory)],
) -> dict[str, str]:
    await user_directory.delete(user_id)
    return {"message": "User deleted successfully."}
