"""Name listings built on top of DirectoryClient.search."""

from __future__ import annotations

import logging
from typing import Optional

from .client import DirectoryClient
from .errors import FilterSyntaxError
from .filters import COMPUTER_CATEGORY, USER_CATEGORY, and_filters, check_filter, normalize_filter
from .models import NAME_ATTRIBUTE, NameList

log = logging.getLogger(__name__)


def list_names(
    client: DirectoryClient,
    filter_expression: str,
    connection_target: Optional[str] = None,
) -> NameList:
    """Sorted values of the `name` attribute of every matching object.

    Entries without a name contribute nothing, multi-valued names contribute
    every value. Sorting is by code point, so "PC10" < "pc2".
    """
    flt = normalize_filter(filter_expression)
    if not flt:
        raise FilterSyntaxError("filter is required", filter_expression)
    check_filter(flt)

    entries = client.search(
        connection_target=connection_target,
        filter_expression=flt,
        attribute_names=[NAME_ATTRIBUTE],
    )
    names: NameList = []
    for e in entries:
        names.extend(e.get(NAME_ATTRIBUTE))
    names.sort()
    log.debug("list_names %s: %d names", flt, len(names))
    return names


def list_computer_names(
    client: DirectoryClient,
    connection_target: Optional[str] = None,
    filter_expression: Optional[str] = None,
) -> NameList:
    return list_names(client, and_filters(COMPUTER_CATEGORY, filter_expression), connection_target)


def list_user_names(
    client: DirectoryClient,
    connection_target: Optional[str] = None,
    filter_expression: Optional[str] = None,
) -> NameList:
    return list_names(client, and_filters(USER_CATEGORY, filter_expression), connection_target)
