"""FastAPI dependencies for authentication and database access."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession

from sitemetrics.core.config import settings
from sitemetrics.core.database import get_db, get_wiki_connection
from sitemetrics.core.security import decode_access_token
from sitemetrics.models.user import METRICS_VIEW_RIGHT, User
from sitemetrics.services.auth import get_user_by_id
from sitemetrics.services.data_source import DataSource, SqlDataSource
from sitemetrics.services.features import FeatureRegistry

# Bearer header is optional: browsers following page links only send the session cookie
security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Dependency to get the current user from the bearer header or the session cookie."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is not None:
        token = credentials.credentials
    else:
        token = request.cookies.get(settings.auth_cookie_name)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    user_id_str = payload.get("sub")
    if user_id_str is None:
        raise credentials_exception

    try:
        user_id = int(user_id_str)
    except ValueError:
        raise credentials_exception

    user = await get_user_by_id(db, user_id)
    if user is None:
        raise credentials_exception

    return user


# Type alias for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
DbSession = Annotated[AsyncSession, Depends(get_db)]


async def require_metrics_viewer(
    current_user: CurrentUser,
) -> User:
    """Dependency to require an unblocked user holding the metricsview right."""
    if current_user.is_blocked:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account is blocked from viewing site metrics",
        )
    if not current_user.has_right(METRICS_VIEW_RIGHT):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Metrics access requires the {METRICS_VIEW_RIGHT} right",
        )
    return current_user


# Type alias for metrics page access
MetricsViewer = Annotated[User, Depends(require_metrics_viewer)]


async def get_data_source(
    conn: Annotated[AsyncConnection, Depends(get_wiki_connection)],
) -> DataSource:
    """Dependency that wraps the wiki replica connection for report queries."""
    return SqlDataSource(conn)


def get_feature_registry() -> FeatureRegistry:
    """Dependency providing the installed-extension registry."""
    return FeatureRegistry.from_settings()


WikiDataSource = Annotated[DataSource, Depends(get_data_source)]
Features = Annotated[FeatureRegistry, Depends(get_feature_registry)]
