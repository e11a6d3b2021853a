"""Database package for Slingshot."""

from .database import DatabaseManager
from .models import Base, UserToken
from .service import TokenService

__all__ = [
    "Base",
    "DatabaseManager",
    "TokenService",
    "UserToken",
]
