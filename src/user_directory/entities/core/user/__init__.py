"""Entity package: User."""

from .entity import User, UserCreate, UserFields
from .repository import UserRepository
from .table import UserTable

__all__ = ["User", "UserCreate", "UserFields", "UserRepository", "UserTable"]
