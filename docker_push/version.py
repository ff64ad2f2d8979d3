"""Version utility to read from environment or installed package metadata"""

import os
from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION_NAME = "docker-push"


def get_version() -> str:
    """
    Resolve the docker-push version.

    Priority:
    1. BUILD_VERSION environment variable (set by CI from the git tag)
    2. Installed distribution metadata
    3. "unknown" when running from a tree that was never installed
    """
    if build_version := os.getenv("BUILD_VERSION"):
        return build_version

    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "unknown"


__version__ = get_version()
