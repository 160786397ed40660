from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from ..ad import DirectoryClient, list_computer_names, list_user_names
from ..ad.errors import (
    DirectoryConnectionError,
    DirectoryError,
    FilterSyntaxError,
    InvalidTargetError,
)
from ..deps import get_client

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/directory", tags=["directory"])


class EntryOut(BaseModel):
    dn: str
    attributes: dict[str, List[str]] = Field(default_factory=dict)


class SearchOut(BaseModel):
    count: int
    entries: List[EntryOut]


class NamesOut(BaseModel):
    count: int
    names: List[str]


class HealthOut(BaseModel):
    ok: bool
    message: str


def _http_error(e: DirectoryError) -> HTTPException:
    if isinstance(e, (FilterSyntaxError, InvalidTargetError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, DirectoryConnectionError):
        log.warning("Directory unavailable: %s", e)
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    log.error("Directory search failed: %s", e)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


def _opt(s: Optional[str]) -> Optional[str]:
    s = (s or "").strip()
    return s or None


@router.get("/search", response_model=SearchOut)
def search(
    target: str = "",
    flt: str = Query("", alias="filter"),
    attr: Optional[List[str]] = Query(None),
    client: DirectoryClient = Depends(get_client),
):
    """Subtree search; `attr` may repeat (?attr=name&attr=description)."""
    try:
        entries = client.search(_opt(target), _opt(flt), attr or None)
    except DirectoryError as e:
        raise _http_error(e) from e
    return SearchOut(
        count=len(entries),
        entries=[EntryOut(dn=e.dn, attributes=dict(e.attributes)) for e in entries],
    )


@router.get("/computers", response_model=NamesOut)
def computers(
    target: str = "",
    flt: str = Query("", alias="filter"),
    client: DirectoryClient = Depends(get_client),
):
    try:
        names = list_computer_names(client, _opt(target), _opt(flt))
    except DirectoryError as e:
        raise _http_error(e) from e
    return NamesOut(count=len(names), names=names)


@router.get("/users", response_model=NamesOut)
def users(
    target: str = "",
    flt: str = Query("", alias="filter"),
    client: DirectoryClient = Depends(get_client),
):
    try:
        names = list_user_names(client, _opt(target), _opt(flt))
    except DirectoryError as e:
        raise _http_error(e) from e
    return NamesOut(count=len(names), names=names)


@router.get("/health", response_model=HealthOut)
def health(target: str = "", client: DirectoryClient = Depends(get_client)):
    ok, message = client.test_connection(_opt(target))
    return HealthOut(ok=ok, message=message)
