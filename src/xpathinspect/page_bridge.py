from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

from lxml.html import HtmlElement

from .errors import InspectorError
from .inspector import LocatorInspector
from .models import Candidate
from .oracle import PageOracle
from .providers import ProviderChain
from .tree import element_children, load_document, tag_name

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, Page

logger = logging.getLogger("xpathinspect.engine")

_ELEMENT_PATH_SCRIPT = """
(el) => {
  const steps = [];
  let current = el;
  while (current && current.nodeType === Node.ELEMENT_NODE) {
    const tag = current.tagName.toLowerCase();
    let index = 1;
    let sibling = current;
    while ((sibling = sibling.previousElementSibling)) {
      if (sibling.tagName === current.tagName) {
        index += 1;
      }
    }
    steps.unshift({ tag, index });
    current = current.parentElement;
  }
  return steps;
}
"""


@dataclass(slots=True)
class PageSelection:
    inspector: LocatorInspector
    node: HtmlElement
    candidate: Candidate
    live_match_count: int


def capture_document(page: Page) -> HtmlElement:
    return load_document(page.content())


def element_path(element: ElementHandle) -> list[tuple[str, int]]:
    try:
        payload = element.evaluate(_ELEMENT_PATH_SCRIPT)
    except Exception as exc:
        logger.debug("Element path could not be read: %s", exc)
        return []

    steps: list[tuple[str, int]] = []
    for item in payload or []:
        tag = str(item.get("tag") or "").strip().lower()
        try:
            index = int(item.get("index") or 0)
        except (TypeError, ValueError):
            return []
        if not tag or index < 1:
            return []
        steps.append((tag, index))
    return steps


def resolve_element(document_root: HtmlElement, element: ElementHandle) -> HtmlElement | None:
    steps = element_path(element)
    if not steps or steps[0][0] != tag_name(document_root):
        return None

    current = document_root
    for tag, index in steps[1:]:
        same_tag = [child for child in element_children(current) if tag_name(child) == tag]
        if index > len(same_tag):
            # Snapshot markup and live DOM diverged.
            return None
        current = same_tag[index - 1]
    return current


def inspect_page_element(
    page: Page,
    element: ElementHandle,
    provider_chain: ProviderChain | None = None,
) -> PageSelection:
    document_root = capture_document(page)
    node = resolve_element(document_root, element)
    if node is None:
        raise InspectorError("Selected element could not be located in the page snapshot.")

    inspector = LocatorInspector.for_document(document_root, provider_chain)
    candidate = inspector.on_node_selected(node)
    live_count = PageOracle(page).evaluate(candidate.expression)
    if live_count != 1:
        logger.warning("Locator %s matched %d element(s) on the live page.", candidate.expression, live_count)
    return PageSelection(inspector=inspector, node=node, candidate=candidate, live_match_count=live_count)
