from __future__ import annotations

import re

_NCNAME_PATTERN = re.compile(r"[A-Za-z_][\w.-]*")


def xpath_literal(value: str) -> str:
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    pieces = value.split("'")
    quoted = [f"'{piece}'" for piece in pieces]
    return "concat(" + ", \"'\", ".join(quoted) + ")"


def name_test(tag: str) -> str:
    # Prefixed HTML tags (fb:like, o:p) would be read as undeclared namespaces.
    if _NCNAME_PATTERN.fullmatch(tag):
        return tag
    return f"*[name()={xpath_literal(tag)}]"


def attribute_equals(attr: str, value: str) -> str:
    return f"@{attr}={xpath_literal(value)}"


def any_element_with(attr: str, value: str) -> str:
    return f"//*[{attribute_equals(attr, value)}]"


def tag_with(tag: str, predicate: str) -> str:
    return f"//{name_test(tag)}[{predicate}]"
