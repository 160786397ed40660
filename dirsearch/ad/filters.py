"""LDAP search filter helpers (RFC 4515)."""

from __future__ import annotations

from .errors import FilterSyntaxError

MATCH_ALL = "(objectClass=*)"

COMPUTER_CATEGORY = "(objectCategory=Computer)"
USER_CATEGORY = "(objectCategory=User)"

MAX_FILTER_DEPTH = 100


def normalize_filter(expr: str | None) -> str | None:
    """Strip a filter and wrap a bare predicate (name=PC*) in parentheses.

    Blank input means "no filter" and gives None.
    """
    s = (expr or "").strip()
    if not s:
        return None
    if not s.startswith("("):
        s = f"({s})"
    return s


def and_filters(*parts: str | None) -> str:
    """Conjunction of filters; blank parts are skipped."""
    items = [p for p in (normalize_filter(x) for x in parts) if p]
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    return "(&" + "".join(items) + ")"


def check_filter(expr: str | None) -> str:
    """Validate filter structure and return it stripped.

    Checks balanced parentheses, non-empty AND/OR groups, a single operand for
    NOT, an attribute in every predicate, at most MAX_FILTER_DEPTH levels of
    nesting and no text after the outer item.
    Values are not interpreted: literal parentheses must already be escaped.
    """
    s = (expr or "").strip()
    if not s:
        raise FilterSyntaxError("empty filter", expr)
    end = _check_item(s, 0, expr)
    if end != len(s):
        raise FilterSyntaxError(f"unexpected text after position {end}: {s[end:]!r}", expr)
    return s


def _check_item(s: str, pos: int, expr: str | None, depth: int = 1) -> int:
    if depth > MAX_FILTER_DEPTH:
        raise FilterSyntaxError(f"filter nested deeper than {MAX_FILTER_DEPTH} levels", expr)
    if pos >= len(s) or s[pos] != "(":
        raise FilterSyntaxError(f"expected '(' at position {pos}", expr)
    pos += 1

    if pos < len(s) and s[pos] in "&|!":
        op = s[pos]
        pos += 1
        operands = 0
        while pos < len(s) and s[pos] == "(":
            pos = _check_item(s, pos, expr, depth + 1)
            operands += 1
        if operands == 0:
            raise FilterSyntaxError(f"'{op}' without operands", expr)
        if op == "!" and operands != 1:
            raise FilterSyntaxError("'!' takes exactly one operand", expr)
    else:
        start = pos
        while pos < len(s) and s[pos] not in "()":
            pos += 1
        predicate = s[start:pos]
        if "=" not in predicate or predicate.startswith("="):
            raise FilterSyntaxError(f"invalid predicate {predicate!r}", expr)

    if pos >= len(s) or s[pos] != ")":
        raise FilterSyntaxError("unbalanced parentheses", expr)
    return pos + 1
