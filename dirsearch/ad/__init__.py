"""Directory (LDAP / Active Directory) search package.

Public API:
    - DirectoryConfig, DirectoryClient
    - SearchRequest, SearchEntry
    - list_names, list_computer_names, list_user_names
    - DirectoryError and its subclasses
"""

from .models import DirectoryConfig, SearchEntry, SearchRequest
from .client import DirectoryClient
from .errors import (
    AttributeNotFoundError,
    DirectoryConnectionError,
    DirectoryError,
    FilterSyntaxError,
    InvalidTargetError,
)
from .queries import list_computer_names, list_names, list_user_names

__all__ = [
    "DirectoryConfig",
    "DirectoryClient",
    "SearchRequest",
    "SearchEntry",
    "list_names",
    "list_computer_names",
    "list_user_names",
    "DirectoryError",
    "DirectoryConnectionError",
    "FilterSyntaxError",
    "InvalidTargetError",
    "AttributeNotFoundError",
]
