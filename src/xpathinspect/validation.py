from __future__ import annotations

from dataclasses import dataclass
import re
from typing import TYPE_CHECKING

from lxml.html import HtmlElement

from .confidence import classify
from .models import Candidate

if TYPE_CHECKING:
    from .oracle import UniquenessOracle

_FENCE_PATTERN = re.compile(r"```[A-Za-z]*")
_PREFIX_PATTERN = re.compile(r"^(?:xpath\s*[:=]\s*)", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class ExternalValidation:
    accepted: bool
    match_count: int
    candidate: Candidate | None
    message: str


def clean_provider_output(raw: str | None, prompt: str | None = None) -> str:
    text = str(raw or "")
    if prompt:
        text = text.replace(prompt, "")
    text = _FENCE_PATTERN.sub("\n", text)

    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        return ""

    first = _PREFIX_PATTERN.sub("", lines[0]).strip().strip("`").strip()
    if len(first) >= 2 and first[0] == first[-1] and first[0] in {"'", '"'}:
        first = first[1:-1].strip()
    return first


def validate_external_candidate(
    raw_expression: str | None,
    oracle: UniquenessOracle,
    node: HtmlElement,
    *,
    prompt: str | None = None,
) -> ExternalValidation:
    expression = clean_provider_output(raw_expression, prompt)
    if not expression:
        return ExternalValidation(False, 0, None, "External locator is empty.")

    match_count = oracle.evaluate(expression)
    if match_count != 1:
        return ExternalValidation(False, match_count, None, "External locator is not unique in DOM.")
    if not oracle.resolves_to(expression, node):
        return ExternalValidation(False, match_count, None, "External locator selects a different element.")

    candidate = Candidate(
        expression=expression,
        confidence=classify(expression),
        rationale="Suggested by an external provider and verified locally.",
        strategy_id=None,
    )
    return ExternalValidation(True, match_count, candidate, "External locator is unique.")
