from __future__ import annotations

import re
from typing import Sequence

from lxml import html
from lxml.html import HtmlElement

from .models import ElementDescription


def load_document(markup: str | bytes) -> HtmlElement:
    return html.document_fromstring(markup)


def normalize_space(value: str | None, limit: int | None = None) -> str:
    if not value:
        return ""
    compact = re.sub(r"\s+", " ", str(value)).strip()
    if limit is not None:
        return compact[:limit]
    return compact


def normalize_classes(raw: Sequence[str] | str | None) -> list[str]:
    if not raw:
        return []
    if isinstance(raw, str):
        items = raw.split()
    else:
        items = [item for item in raw if isinstance(item, str)]

    seen: set[str] = set()
    normalized: list[str] = []
    for item in items:
        clean = item.strip()
        if not clean or clean in seen:
            continue
        seen.add(clean)
        normalized.append(clean)
    return normalized


def is_element(node: object) -> bool:
    # Comments and processing instructions expose a callable tag.
    return isinstance(node, HtmlElement) and isinstance(node.tag, str)


def tag_name(node: HtmlElement) -> str:
    return str(node.tag).lower()


def attribute(node: HtmlElement, name: str) -> str | None:
    value = node.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def class_tokens(node: HtmlElement) -> list[str]:
    return normalize_classes(node.get("class"))


def text(node: HtmlElement) -> str:
    return normalize_space(node.text_content())


def parent(node: HtmlElement) -> HtmlElement | None:
    current = node.getparent()
    if current is None or not is_element(current):
        return None
    return current


def element_children(node: HtmlElement) -> list[HtmlElement]:
    return [child for child in node if is_element(child)]


def siblings_of_same_tag(node: HtmlElement) -> list[HtmlElement]:
    container = parent(node)
    if container is None:
        return [node]
    return [child for child in element_children(container) if child.tag == node.tag]


def root(node: HtmlElement) -> HtmlElement:
    return node.getroottree().getroot()


def ancestors(node: HtmlElement) -> list[HtmlElement]:
    chain: list[HtmlElement] = []
    current = parent(node)
    while current is not None:
        chain.append(current)
        current = parent(current)
    return chain


def is_attached(node: HtmlElement, document_root: HtmlElement) -> bool:
    if node is document_root:
        return True
    chain = ancestors(node)
    return bool(chain) and chain[-1] is document_root


def describe_element(node: HtmlElement) -> ElementDescription:
    container = parent(node)
    content = text(node)
    outer = html.tostring(node, encoding="unicode", with_tail=False)
    return ElementDescription(
        tag=tag_name(node),
        id=attribute(node, "id"),
        class_name=attribute(node, "class"),
        attributes=tuple((str(key), str(value)) for key, value in node.attrib.items()),
        text=content[:100] or None,
        parent_tag=tag_name(container) if container is not None else None,
        outer_html=outer[:500],
    )
