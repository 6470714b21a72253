"""SQLAlchemy models for Site Metrics."""

from sitemetrics.models.base import Base
from sitemetrics.models.user import User

__all__ = [
    "Base",
    "User",
]
