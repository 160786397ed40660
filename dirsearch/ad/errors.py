"""Exceptions raised by the directory search layer.

Connection and filter errors always reach the caller; nothing here is retried.
"""

from __future__ import annotations

import builtins


class DirectoryError(Exception):
    """Base class for directory search failures."""


class DirectoryConnectionError(DirectoryError, builtins.ConnectionError):
    """Target unreachable, TLS failure, bind refused or base object missing."""


class FilterSyntaxError(DirectoryError, ValueError):
    """Malformed LDAP search filter."""

    def __init__(self, message: str, filter_expression: str | None = None) -> None:
        super().__init__(message)
        self.filter_expression = filter_expression


class InvalidTargetError(DirectoryError, ValueError):
    """Connection target is not an LDAP URI, ADsPath or DN."""


class AttributeNotFoundError(DirectoryError, KeyError):
    """Requested attribute has no value on an entry."""

    def __init__(self, attribute: str, dn: str = "") -> None:
        super().__init__(attribute)
        self.attribute = attribute
        self.dn = dn

    def __str__(self) -> str:
        if self.dn:
            return f"attribute {self.attribute!r} not found on {self.dn}"
        return f"attribute {self.attribute!r} not found"
