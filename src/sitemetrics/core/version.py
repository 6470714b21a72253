"""Version lookup for the running service."""

import os
from importlib.metadata import PackageNotFoundError, version


def get_version() -> str:
    """Get the service version.

    APP_VERSION from the environment takes precedence (set by release builds),
    then the installed distribution metadata, then 'unknown'.
    """
    env_version = os.environ.get("APP_VERSION", "").strip()
    if env_version:
        return env_version

    try:
        return version("sitemetrics")
    except PackageNotFoundError:
        return "unknown"
