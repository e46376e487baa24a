from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from lxml import etree
from lxml.html import HtmlElement

from .tree import is_element

if TYPE_CHECKING:
    from playwright.sync_api import Page

logger = logging.getLogger("xpathinspect.oracle")


class UniquenessOracle(Protocol):
    def evaluate(self, expression: str) -> int: ...

    def is_unique(self, expression: str) -> bool: ...

    def resolves_to(self, expression: str, node: HtmlElement) -> bool: ...


class DocumentOracle:
    """Evaluates XPath 1.0 expressions against a parsed document.

    Evaluation failures never escape: a malformed or unsupported expression
    simply matches nothing.
    """

    def __init__(self, document_root: HtmlElement) -> None:
        self.document_root = document_root

    def matches(self, expression: str) -> list[HtmlElement]:
        text = str(expression or "").strip()
        if not text:
            return []
        try:
            result = self.document_root.xpath(text)
        except (etree.XPathError, ValueError) as exc:
            # ValueError covers strings lxml refuses to compile (NUL, lone surrogates).
            logger.debug("XPath %r could not be evaluated: %s", text, exc)
            return []
        if not isinstance(result, list):
            return []
        return [item for item in result if is_element(item)]

    def evaluate(self, expression: str) -> int:
        count = len(self.matches(expression))
        logger.debug("XPath %r matched %d element(s)", expression, count)
        return count

    def is_unique(self, expression: str) -> bool:
        return self.evaluate(expression) == 1

    def resolves_to(self, expression: str, node: HtmlElement) -> bool:
        found = self.matches(expression)
        return len(found) == 1 and found[0] is node


class PageOracle:
    """Counts XPath matches on a live Playwright page."""

    def __init__(self, page: Page) -> None:
        self.page = page

    def evaluate(self, expression: str) -> int:
        text = str(expression or "").strip()
        if not text:
            return 0
        try:
            return self.page.locator(f"xpath={text}").count()
        except Exception as exc:
            logger.debug("Page rejected XPath %r: %s", text, exc)
            return 0

    def is_unique(self, expression: str) -> bool:
        return self.evaluate(expression) == 1

    def resolves_to(self, expression: str, node: HtmlElement) -> bool:
        # A live page cannot be compared against a parsed node; uniqueness is the only check.
        return self.is_unique(expression)
