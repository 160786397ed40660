"""Module-level entry points using the environment configuration.

    from dirsearch import list_computer_names
    list_computer_names(filter_expression="(operatingSystem=*Server*)")
"""

from __future__ import annotations

from typing import Optional, Sequence

from .ad import DirectoryClient
from .ad import queries
from .ad.models import NameList, SearchResult
from .env_settings import directory_config


def default_client() -> DirectoryClient:
    return DirectoryClient(directory_config())


def search(
    connection_target: Optional[str] = None,
    filter_expression: Optional[str] = None,
    attribute_names: Optional[Sequence[str]] = None,
) -> SearchResult:
    return default_client().search(connection_target, filter_expression, attribute_names)


def list_computer_names(
    connection_target: Optional[str] = None,
    filter_expression: Optional[str] = None,
) -> NameList:
    return queries.list_computer_names(default_client(), connection_target, filter_expression)


def list_user_names(
    connection_target: Optional[str] = None,
    filter_expression: Optional[str] = None,
) -> NameList:
    return queries.list_user_names(default_client(), connection_target, filter_expression)
