"""User model for access to the metrics page."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, String, func
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from sitemetrics.models.base import Base

METRICS_VIEW_RIGHT = "metricsview"


class UserRole(str, Enum):
    """User groups, mirroring the wiki's sysop/staff/user split."""

    ADMIN = "admin"
    STAFF = "staff"
    VIEWER = "viewer"


# Rights granted to each role
ROLE_RIGHTS: dict[UserRole, frozenset[str]] = {
    UserRole.ADMIN: frozenset({METRICS_VIEW_RIGHT}),
    UserRole.STAFF: frozenset({METRICS_VIEW_RIGHT}),
    UserRole.VIEWER: frozenset(),
}


class User(Base):
    """User model for authentication and authorization."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=UserRole.VIEWER,
    )
    is_blocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def has_right(self, right: str) -> bool:
        """Check whether the user's role grants the given right."""
        return right in ROLE_RIGHTS.get(self.role, frozenset())

    @property
    def can_view_metrics(self) -> bool:
        return not self.is_blocked and self.has_right(METRICS_VIEW_RIGHT)
