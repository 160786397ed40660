from __future__ import annotations


def domain_to_base_dn(domain: str) -> str:
    domain = (domain or "").strip().strip(".")
    if not domain or "." not in domain:
        return ""
    parts = [p for p in domain.split(".") if p]
    return ",".join([f"DC={p}" for p in parts])


def build_bind_principal(username: str, domain: str) -> str:
    """Turn a short login into a UPN (user@domain).

    UPNs and DNs (anything with '@' or '=') are returned unchanged.
    """
    u = (username or "").strip()
    d = (domain or "").strip().strip(".")
    if not u:
        return ""
    if "@" in u or "=" in u:
        return u
    return f"{u}@{d}" if d else u


def looks_like_dn(text: str) -> bool:
    """Rough check that text is a DN (e.g. OU=Workstations,DC=corp,DC=local)."""
    s = (text or "").strip()
    if "=" not in s:
        return False
    first = s.split(",", 1)[0]
    attr = first.split("=", 1)[0].strip()
    return bool(attr) and attr.replace("-", "").isalnum()
