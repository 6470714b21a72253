"""Core application components package."""

from .config import settings
from .database import get_db, get_wiki_connection
from .deps import (
    CurrentUser,
    DbSession,
    Features,
    MetricsViewer,
    WikiDataSource,
    get_current_user,
    get_data_source,
    get_feature_registry,
    require_metrics_viewer,
)
from .security import create_access_token, decode_access_token, hash_password, verify_password
from .version import get_version

__all__ = [
    "settings",
    "get_db",
    "get_wiki_connection",
    "CurrentUser",
    "DbSession",
    "Features",
    "MetricsViewer",
    "WikiDataSource",
    "get_current_user",
    "get_data_source",
    "get_feature_registry",
    "require_metrics_viewer",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "verify_password",
    "get_version",
]
