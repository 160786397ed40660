"""Connection target parsing.

Accepted forms:
    ldap://dc1.corp.local/OU=Workstations,DC=corp,DC=local
    LDAPS://dc1.corp.local:3269
    LDAP://OU=Workstations,DC=corp,DC=local   (serverless ADsPath)
    OU=Workstations,DC=corp,DC=local          (DN on the configured server)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlsplit

from ..ad_utils import looks_like_dn
from .errors import InvalidTargetError
from .models import DirectoryConfig

LDAP_PORT = 389
LDAPS_PORT = 636


@dataclass(frozen=True)
class Target:
    host: str
    port: int
    use_ssl: bool
    base_dn: Optional[str] = None


def _configured(cfg: DirectoryConfig, base_dn: Optional[str] = None) -> Target:
    return Target(host=cfg.host, port=cfg.port, use_ssl=cfg.use_ssl, base_dn=base_dn)


def parse_target(target: Optional[str], cfg: DirectoryConfig) -> Target:
    s = (target or "").strip()
    if not s:
        return _configured(cfg)

    scheme, sep, rest = s.partition("://")
    if not sep:
        if looks_like_dn(s):
            return _configured(cfg, s)
        raise InvalidTargetError(f"not an LDAP URI or DN: {s!r}")

    scheme = scheme.lower()
    if scheme not in ("ldap", "ldaps"):
        raise InvalidTargetError(f"unsupported scheme {scheme!r} in {s!r}")

    # LDAP://OU=...,DC=... names no server: the DN goes to the configured one.
    head = rest.split("/", 1)[0]
    if "=" in head:
        return _configured(cfg, unquote(rest).strip() or None)

    parts = urlsplit(f"{scheme}://{rest}")
    try:
        port = parts.port
    except ValueError as e:
        raise InvalidTargetError(f"bad port in {s!r}") from e

    host = parts.hostname or ""
    use_ssl = scheme == "ldaps"
    if not host:
        if port is not None:
            raise InvalidTargetError(f"port without host in {s!r}")
        host = cfg.host
        port = cfg.port
        use_ssl = cfg.use_ssl if scheme == "ldap" else True
    elif port is None:
        port = LDAPS_PORT if use_ssl else LDAP_PORT

    dn = unquote(parts.path.lstrip("/")).strip()
    if parts.query or parts.fragment:
        raise InvalidTargetError(f"query strings are not supported: {s!r}")
    if dn and not looks_like_dn(dn):
        raise InvalidTargetError(f"bad distinguished name {dn!r}")

    return Target(host=host, port=port, use_ssl=use_ssl, base_dn=dn or None)
