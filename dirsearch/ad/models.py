from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Mapping, Optional, Sequence

from ..ad_utils import build_bind_principal, domain_to_base_dn
from .errors import AttributeNotFoundError
from .filters import MATCH_ALL, normalize_filter

NAME_ATTRIBUTE = "name"
DEFAULT_PAGE_SIZE = 1000


@dataclass
class DirectoryConfig:
    server: str = ""
    domain: str = ""
    port: int = 636
    use_ssl: bool = True
    starttls: bool = False
    bind_username: str = ""
    bind_password: str = ""
    base_dn: str = ""
    tls_validate: bool = False
    ca_cert_file: str = ""
    connect_timeout_s: float = 10.0
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def host(self) -> str:
        # Without an explicit server, bind to the domain name itself:
        # DNS round-robins it over the domain controllers.
        server = (self.server or "").strip()
        if server:
            return server
        return (self.domain or "").strip().strip(".")

    @property
    def bind_principal(self) -> str:
        return build_bind_principal(self.bind_username, self.domain)

    @property
    def default_root(self) -> str:
        """Configured search root; empty means "ask the server"."""
        explicit = (self.base_dn or "").strip()
        if explicit:
            return explicit
        return domain_to_base_dn(self.domain)


@dataclass
class SearchRequest:
    """Search parameters as given by the caller.

    Defaults are resolved on demand and never written back.
    """

    connection_target: Optional[str] = None
    filter_expression: Optional[str] = None
    attribute_names: Optional[Sequence[str]] = None

    def resolved_filter(self) -> str:
        return normalize_filter(self.filter_expression) or MATCH_ALL

    def resolved_attributes(self) -> List[str]:
        names = self.attribute_names
        if not names:
            return [NAME_ATTRIBUTE]
        if isinstance(names, str):
            names = [names]
        out: list[str] = []
        seen: set[str] = set()
        for a in names:
            a = (a or "").strip()
            if a and a.lower() not in seen:
                seen.add(a.lower())
                out.append(a)
        return out or [NAME_ATTRIBUTE]


@dataclass
class SearchEntry(Mapping[str, List[str]]):
    """One search result: DN plus attribute name -> list of string values."""

    dn: str
    attributes: dict[str, List[str]] = field(default_factory=dict)

    def __getitem__(self, name: str) -> List[str]:
        key = self._key(name)
        if key is None:
            raise AttributeNotFoundError(name, self.dn)
        return self.attributes[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.attributes)

    def __len__(self) -> int:
        return len(self.attributes)

    def _key(self, name: str) -> Optional[str]:
        # LDAP attribute names are case-insensitive.
        if name in self.attributes:
            return name
        low = name.lower()
        for k in self.attributes:
            if k.lower() == low:
                return k
        return None

    def get(self, name: str, default: Optional[List[str]] = None) -> List[str]:  # type: ignore[override]
        key = self._key(name)
        if key is None:
            return list(default) if default is not None else []
        return self.attributes[key]

    def first(self, name: str) -> str:
        values = self.get(name)
        if not values:
            raise AttributeNotFoundError(name, self.dn)
        return values[0]


SearchResult = List[SearchEntry]
NameList = List[str]
