from .user_directory import DashboardData, UserDirectoryRepository

__all__ = ["DashboardData", "UserDirectoryRepository"]
