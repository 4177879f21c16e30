"""FastAPI dependency implementations."""

from fastapi import Request

from src.user_directory.api.http.app_data import ApplicationDependencies
from src.user_directory.core.repositories.user_directory import UserDirectoryRepository
from src.user_directory.core.services.notification import NotificationService
from src.user_directory.core.services.search.search_service import UserSearchService


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_search_service(request: Request) -> UserSearchService:
    """Get the user search service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.search_service


def get_notification_service(request: Request) -> NotificationService:
    """Get the notification service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.notification_service


def get_user_directory(request: Request) -> UserDirectoryRepository:
    """Get the user directory repository instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.user_directory
