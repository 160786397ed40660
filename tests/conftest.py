import re
import sys
from fnmatch import fnmatchcase
from pathlib import Path

import pytest

# Ensure project root is importable
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from dirsearch.ad import client as client_mod  # noqa: E402
from dirsearch.ad.client import PAGED_RESULTS_OID  # noqa: E402
from dirsearch.ad.models import DirectoryConfig  # noqa: E402

_PREDICATE = re.compile(r"\(([A-Za-z0-9;-]+)=([^()]*)\)")


def simple_match(flt, attrs):
    """Tiny filter evaluator: AND of equality/wildcard predicates only."""
    preds = _PREDICATE.findall(flt)
    for name, pattern in preds:
        values = None
        for k, v in attrs.items():
            if k.lower() == name.lower():
                values = v if isinstance(v, list) else [v]
        if name.lower() == "objectclass" and pattern == "*":
            continue
        if not values:
            return False
        if not any(fnmatchcase(str(x).lower(), pattern.lower()) for x in values):
            return False
    return True


class FakeServer:
    def __init__(self, host, port=None, use_ssl=False, get_info=None, tls=None, connect_timeout=None):
        self.host = host
        self.port = port
        self.use_ssl = use_ssl
        self.get_info = get_info
        self.tls = tls
        self.connect_timeout = connect_timeout
        self.info = None


class FakeDirectory:
    """In-memory directory shared by every FakeConnection of a test."""

    def __init__(self):
        self.entries = []
        self.naming_context = "DC=corp,DC=local"
        self.announce_info = False
        self.bind_ok = True
        self.bind_result = {"result": 49, "description": "invalidCredentials", "message": ""}
        self.open_error = None
        self.search_error = None
        self.result_code = 0
        self.result_description = "success"
        self.referrals = False
        self.connections = []
        self.searches = []

    def add(self, dn, **attributes):
        self.entries.append({"dn": dn, "attributes": attributes})

    def matching(self, base, flt):
        base_l = base.lower()
        return [
            e for e in self.entries
            if e["dn"].lower().endswith(base_l) and simple_match(flt, e["attributes"])
        ]


class FakeConnection:
    def __init__(self, directory, server, user=None, password=None, **kwargs):
        self.d = directory
        self.server = server
        self.user = user
        self.password = password
        self.kwargs = kwargs
        self.result = None
        self.response = None
        self.started_tls = False
        self.unbound = False
        if directory.announce_info:
            server.info = type("Info", (), {"other": {"defaultNamingContext": [directory.naming_context]}})()
        directory.connections.append(self)

    def open(self):
        if self.d.open_error is not None:
            raise self.d.open_error

    def start_tls(self):
        self.started_tls = True

    def bind(self):
        if self.d.bind_ok:
            self.result = {"result": 0, "description": "success"}
            return True
        self.result = dict(self.d.bind_result)
        return False

    def unbind(self):
        self.unbound = True

    def search(self, search_base, search_filter, search_scope=None, attributes=None,
               paged_size=None, paged_cookie=None, **kwargs):
        self.d.searches.append({
            "base": search_base,
            "filter": search_filter,
            "scope": search_scope,
            "attributes": list(attributes or []),
            "paged_size": paged_size,
            "cookie": paged_cookie,
        })
        if self.d.search_error is not None:
            raise self.d.search_error

        if search_base == "" and search_scope == client_mod.BASE:
            self.response = [{
                "type": "searchResEntry",
                "dn": "",
                "attributes": {"defaultNamingContext": self.d.naming_context},
            }]
            self.result = {"result": 0, "description": "success"}
            return True

        if self.d.result_code != 0:
            self.response = []
            self.result = {"result": self.d.result_code, "description": self.d.result_description, "message": ""}
            return False

        found = self.d.matching(search_base, search_filter)
        start = int(paged_cookie or 0)
        size = paged_size or len(found) or 1
        page = found[start:start + size]
        nxt = start + size
        cookie = str(nxt).encode() if nxt < len(found) else b""

        wanted = {a.lower() for a in (attributes or [])}
        self.response = []
        for e in page:
            attrs = {k: v for k, v in e["attributes"].items() if k.lower() in wanted}
            self.response.append({"type": "searchResEntry", "dn": e["dn"], "attributes": attrs})
        if self.d.referrals:
            self.response.append({"type": "searchResRef", "uri": ["ldap://other.corp.local/DC=other"]})
        self.result = {
            "result": 0,
            "description": "success",
            "controls": {PAGED_RESULTS_OID: {"value": {"size": 0, "cookie": cookie}}},
        }
        return bool(page)


@pytest.fixture
def directory(monkeypatch):
    d = FakeDirectory()
    monkeypatch.setattr(client_mod, "Server", FakeServer)
    monkeypatch.setattr(client_mod, "Connection", lambda server, **kw: FakeConnection(d, server, **kw))
    return d


@pytest.fixture
def cfg():
    return DirectoryConfig(
        server="dc1.corp.local",
        domain="corp.local",
        port=636,
        use_ssl=True,
        bind_username="svc_search",
        bind_password="secret",
    )


@pytest.fixture
def client(directory, cfg):
    return client_mod.DirectoryClient(cfg)
