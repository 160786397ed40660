from __future__ import annotations

from datetime import datetime
import logging
import ssl
from typing import Any, Optional, Sequence

from ldap3 import BASE, DSA, SUBTREE, Connection, Server, Tls
from ldap3.core.exceptions import LDAPException, LDAPInvalidFilterError

from .errors import DirectoryConnectionError, DirectoryError, FilterSyntaxError
from .filters import check_filter
from .models import DirectoryConfig, SearchEntry, SearchRequest, SearchResult
from .targets import Target, parse_target

log = logging.getLogger(__name__)

PAGED_RESULTS_OID = "1.2.840.113556.1.4.319"

# Result codes that mean "this target is not usable with these credentials".
_CONNECTION_RESULT_CODES = {
    1,   # operationsError (AD: search before a successful bind)
    32,  # noSuchObject
    48,  # inappropriateAuthentication
    49,  # invalidCredentials
    50,  # insufficientAccessRights
    51,  # busy
    52,  # unavailable
    53,  # unwillingToPerform
}


def _describe(result: Optional[dict]) -> str:
    res = dict(result or {})
    desc = str(res.get("description") or "")
    msg = str(res.get("message") or "").strip()
    if desc and msg:
        return f"{desc}: {msg}"
    return desc or msg or "unknown error"


def _text(v: Any) -> str:
    if isinstance(v, bytes):
        return v.decode("utf-8", errors="replace")
    if isinstance(v, datetime):
        return v.isoformat()
    return str(v)


def _values(v: Any) -> list[str]:
    if v is None:
        return []
    if isinstance(v, (list, tuple, set)):
        return [_text(x) for x in v if x is not None and x != ""]
    if v == "" or v == b"":
        return []
    return [_text(v)]


def _lookup(attrs: dict, name: str) -> Any:
    if name in attrs:
        return attrs[name]
    low = name.lower()
    for k, v in attrs.items():
        if str(k).lower() == low:
            return v
    return None


def _to_entry(item: dict, attribute_names: Sequence[str]) -> SearchEntry:
    raw = dict(item.get("attributes") or {})
    attrs: dict[str, list[str]] = {}
    if "*" in attribute_names:
        for k, v in raw.items():
            attrs[str(k)] = _values(v)
    for name in attribute_names:
        if name in ("*", "+"):
            continue
        # Missing attribute -> no values; not an error for a search.
        attrs[name] = _values(_lookup(raw, name))
    return SearchEntry(dn=str(item.get("dn") or ""), attributes=attrs)


class DirectoryClient:
    """Read-only LDAP client doing subtree, paged searches."""

    def __init__(self, cfg: DirectoryConfig) -> None:
        self.cfg = cfg

        tls_kwargs: dict[str, Any] = {
            "validate": ssl.CERT_REQUIRED if cfg.tls_validate else ssl.CERT_NONE,
        }
        # Custom CA only matters when the certificate is verified.
        if cfg.tls_validate and cfg.ca_cert_file:
            tls_kwargs["ca_certs_file"] = cfg.ca_cert_file
        self.tls = Tls(**tls_kwargs)

    def _server(self, target: Target) -> Server:
        return Server(
            host=target.host,
            port=target.port,
            use_ssl=target.use_ssl,
            get_info=DSA,
            tls=self.tls,
            connect_timeout=float(self.cfg.connect_timeout_s),
        )

    def _conn(self, target: Target) -> Connection:
        """Open and bind a connection; anonymous when no bind user is set."""
        if not target.host:
            raise DirectoryConnectionError("no directory server configured (set server or domain)")

        principal = self.cfg.bind_principal
        if principal and self.cfg.bind_password and not target.use_ssl and not self.cfg.starttls:
            log.warning(
                "Password bind as %s to %s:%d is not encrypted (no SSL, StartTLS off)",
                principal, target.host, target.port,
            )
        conn = Connection(
            self._server(target),
            user=principal or None,
            password=(self.cfg.bind_password or None) if principal else None,
            auto_bind=False,
            read_only=True,
            raise_exceptions=False,
        )
        try:
            conn.open()
            if self.cfg.starttls and not target.use_ssl:
                conn.start_tls()
            if not conn.bind():
                raise DirectoryConnectionError(
                    f"bind to {target.host}:{target.port} as {principal or 'anonymous'} failed: "
                    f"{_describe(conn.result)}"
                )
        except LDAPException as e:
            self._close(conn)
            raise DirectoryConnectionError(f"cannot connect to {target.host}:{target.port}: {e}") from e
        except DirectoryConnectionError:
            self._close(conn)
            raise
        return conn

    @staticmethod
    def _close(conn: Connection) -> None:
        try:
            conn.unbind()
        except LDAPException:
            log.debug("unbind failed", exc_info=True)

    def naming_context(self, conn: Connection) -> str:
        """Default naming context announced by the server's root DSE."""
        info = getattr(conn.server, "info", None)
        other = getattr(info, "other", None) or {}
        found = _values(_lookup(dict(other), "defaultNamingContext"))
        if found:
            return found[0]

        try:
            conn.search(
                search_base="",
                search_filter="(objectClass=*)",
                search_scope=BASE,
                attributes=["defaultNamingContext"],
            )
        except LDAPException as e:
            raise DirectoryConnectionError(f"root DSE read failed: {e}") from e
        for item in conn.response or []:
            if item.get("type") != "searchResEntry":
                continue
            found = _values(_lookup(dict(item.get("attributes") or {}), "defaultNamingContext"))
            if found:
                return found[0]
        return ""

    def _root(self, conn: Connection, target: Target) -> str:
        if target.base_dn:
            return target.base_dn
        root = self.cfg.default_root
        if root:
            return root
        root = self.naming_context(conn)
        if not root:
            raise DirectoryConnectionError(
                f"{target.host} did not announce a default naming context; set base_dn or domain"
            )
        log.debug("Discovered default naming context %s", root)
        return root

    def _check_result(self, conn: Connection, flt: str) -> None:
        res = dict(conn.result or {})
        code = res.get("result", 0)
        if code in (0, None):
            return
        if code in _CONNECTION_RESULT_CODES:
            raise DirectoryConnectionError(f"search failed: {_describe(res)}")
        if code == 2 and "filter" in _describe(res).lower():
            raise FilterSyntaxError(f"server rejected filter: {_describe(res)}", flt)
        raise DirectoryError(f"search failed: {_describe(res)}")

    def _paged_search(self, conn: Connection, base: str, flt: str, attrs: list[str]) -> SearchResult:
        entries: SearchResult = []
        cookie: Any = None
        pages = 0
        while True:
            try:
                conn.search(
                    search_base=base,
                    search_filter=flt,
                    search_scope=SUBTREE,
                    attributes=attrs,
                    paged_size=int(self.cfg.page_size),
                    paged_cookie=cookie,
                )
            except LDAPInvalidFilterError as e:
                raise FilterSyntaxError(f"invalid filter: {e}", flt) from e
            except LDAPException as e:
                raise DirectoryConnectionError(f"search on {base} failed: {e}") from e

            self._check_result(conn, flt)
            pages += 1
            for item in conn.response or []:
                if item.get("type") != "searchResEntry":
                    continue
                entries.append(_to_entry(item, attrs))

            controls = dict(conn.result or {}).get("controls") or {}
            cookie = ((controls.get(PAGED_RESULTS_OID) or {}).get("value") or {}).get("cookie")
            if not cookie:
                break

        log.debug("Search base=%s filter=%s attrs=%s: %d page(s)", base, flt, attrs, pages)
        return entries

    def run(self, req: SearchRequest) -> SearchResult:
        flt = check_filter(req.resolved_filter())
        attrs = req.resolved_attributes()
        target = parse_target(req.connection_target, self.cfg)

        conn = self._conn(target)
        try:
            base = self._root(conn, target)
            entries = self._paged_search(conn, base, flt, attrs)
        finally:
            self._close(conn)

        log.info("Directory search on %s %s: %d entries", target.host, base, len(entries))
        return entries

    def search(
        self,
        connection_target: Optional[str] = None,
        filter_expression: Optional[str] = None,
        attribute_names: Optional[Sequence[str]] = None,
    ) -> SearchResult:
        """Subtree search with defaults.

        - connection_target: LDAP URI / ADsPath / DN; default is the domain root.
        - filter_expression: LDAP filter; default matches every object.
        - attribute_names: attributes to load; default is ["name"].

        Every page is fetched before returning. Raises DirectoryConnectionError
        and FilterSyntaxError.
        """
        return self.run(SearchRequest(connection_target, filter_expression, attribute_names))

    def test_connection(self, connection_target: Optional[str] = None) -> tuple[bool, str]:
        """Bind check. Returns (ok, message)."""
        try:
            target = parse_target(connection_target, self.cfg)
            conn = self._conn(target)
        except DirectoryError as e:
            return False, str(e)
        try:
            root = self._root(conn, target)
        except DirectoryError as e:
            return False, str(e)
        finally:
            self._close(conn)
        return True, f"connected to {target.host}:{target.port}, root {root}"
