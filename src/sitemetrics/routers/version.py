"""Version router for exposing the service version via API."""

from fastapi import APIRouter

from sitemetrics.core.version import get_version

router = APIRouter(prefix="/api", tags=["version"])


@router.get("/version")
async def get_service_version() -> dict[str, str]:
    """Get the service version. Public, no authentication."""
    return {"version": get_version(), "component": "sitemetrics"}
