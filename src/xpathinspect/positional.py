from __future__ import annotations

from typing import TYPE_CHECKING

from lxml.html import HtmlElement

from .tree import attribute, is_element, parent, siblings_of_same_tag, tag_name
from .xpath import any_element_with, name_test

if TYPE_CHECKING:
    from .oracle import UniquenessOracle


def sibling_index(node: HtmlElement) -> tuple[int, int]:
    """Return the 1-based position of ``node`` among same-tag siblings and the sibling count."""
    siblings = siblings_of_same_tag(node)
    for index, sibling in enumerate(siblings, start=1):
        if sibling is node:
            return index, len(siblings)
    return 1, len(siblings)


def build_positional_path(node: HtmlElement, oracle: UniquenessOracle) -> str | None:
    if not is_element(node):
        return None

    steps: list[str] = []
    current: HtmlElement | None = node
    while current is not None:
        if current is not node:
            anchor_id = attribute(current, "id")
            if anchor_id:
                anchor = any_element_with("id", anchor_id)
                # Duplicate ids cannot anchor a path.
                if oracle.is_unique(anchor):
                    steps.append(anchor)
                    break

        tag = name_test(tag_name(current))
        index, count = sibling_index(current)
        steps.append(f"/{tag}" if count == 1 else f"/{tag}[{index}]")
        current = parent(current)

    return "".join(reversed(steps))


def build_absolute_path(node: HtmlElement) -> str | None:
    if not is_element(node):
        return None

    steps: list[str] = []
    current: HtmlElement | None = node
    while current is not None:
        index, _count = sibling_index(current)
        steps.append(f"{name_test(tag_name(current))}[{index}]")
        current = parent(current)

    return "/" + "/".join(reversed(steps))
