"""Identifier case conversion for generated Gunk names.

Struct members are CamelCase Go identifiers and JSON keys are snake_case.
Both conversions know the common Go initialisms, so ``user_id`` becomes
``UserID`` and ``userID`` becomes ``user_id``.
"""

from __future__ import annotations

import re

GO_INITIALISMS = frozenset({
    "ACL", "API", "ASCII", "CPU", "CSS", "DNS", "EOF", "GUID", "HTML",
    "HTTP", "HTTPS", "ID", "IP", "JSON", "LHS", "QPS", "RAM", "RHS",
    "RPC", "SLA", "SMTP", "SQL", "SSH", "TCP", "TLS", "TTL", "UDP",
    "UI", "UID", "UUID", "URI", "URL", "UTF8", "VM", "XML", "XMPP",
    "XSRF", "XSS",
})

_MIN_INITIALISM = min(len(i) for i in GO_INITIALISMS)
_MAX_INITIALISM = max(len(i) for i in GO_INITIALISMS)


def _peek_initialism(name: str, start: int) -> str:
    """Return the longest initialism spelled in upper case at ``name[start:]``.

    A candidate directly followed by a lowercase letter belongs to the next
    word ("HTTPServer" yields "HTTP", not "HTTPS").
    """
    end = start
    while end < len(name) and end - start < _MAX_INITIALISM and name[end].isalnum():
        end += 1
    for stop in range(end, start + _MIN_INITIALISM - 1, -1):
        candidate = name[start:stop]
        if candidate not in GO_INITIALISMS:
            continue
        if stop < len(name) and name[stop].islower():
            continue
        return candidate
    return ""


def camel_to_snake(name: str) -> str:
    """Convert a CamelCase (or already snake_case) name to snake_case."""
    out = []
    last_upper = last_letter = last_ism = False
    i = 0
    while i < len(name):
        ch = name[i]
        is_upper, is_letter = ch.isupper(), ch.isalpha()
        if (last_letter and is_upper) or (last_ism and is_letter):
            out.append("_")
        ism = _peek_initialism(name, i)
        if ism and (not last_upper or last_ism):
            chunk = ism
        else:
            chunk = ch
        last_ism, last_upper, last_letter = len(chunk) > 1, is_upper, is_letter
        out.append(chunk)
        i += len(chunk)
    return "".join(out).lower()


def snake_to_camel(name: str) -> str:
    """Convert snake_case to CamelCase, upper-casing known initialisms."""
    words = []
    for word in name.split("_"):
        if not word:
            continue
        upper = word.upper()
        if upper in GO_INITIALISMS:
            words.append(upper)
        else:
            words.append(word[0].upper() + word[1:].lower())
    return "".join(words)


def force_camel_identifier(name: str) -> str:
    """Convert any proto field name to an exported Go identifier."""
    camel = snake_to_camel(camel_to_snake(name))
    camel = re.sub(r"[^A-Za-z0-9_]", "_", camel)
    if not camel:
        return "_"
    if camel[0].isdigit():
        camel = "_" + camel
    return camel
