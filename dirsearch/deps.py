from __future__ import annotations

from .ad import DirectoryClient
from .env_settings import directory_config


def get_client() -> DirectoryClient:
    """FastAPI dependency; overridden in tests."""
    return DirectoryClient(directory_config())
