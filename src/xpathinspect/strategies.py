from __future__ import annotations

from itertools import combinations
from typing import TYPE_CHECKING

from lxml.html import HtmlElement

from .models import Candidate, ConfidenceTier, Strategy
from .positional import build_absolute_path, build_positional_path
from .tree import attribute, class_tokens, tag_name, text
from .xpath import any_element_with, attribute_equals, tag_with, xpath_literal

if TYPE_CHECKING:
    from .oracle import UniquenessOracle

UNIQUE_ATTRIBUTES = ("name", "data-testid", "data-test", "aria-label", "role")
TAG_UNIQUE_ATTRIBUTES = ("data-testid", "data-test", "name", "role", "aria-label", "title", "placeholder")
COMBINABLE_ATTRIBUTES = ("class", "type", "role", "title")
TAG_OTHER_ATTRIBUTES = ("type", "role", "title", "placeholder", "value")

EXACT_TEXT_MIN_EXCLUSIVE = 2
EXACT_TEXT_MAX_EXCLUSIVE = 50
PARTIAL_TEXT_MIN_EXCLUSIVE = 10
PARTIAL_TEXT_WORDS = 3


def _raw_value(node: HtmlElement, name: str) -> str | None:
    if attribute(node, name) is None:
        return None
    return node.get(name)


def _first_resolving(
    node: HtmlElement,
    oracle: UniquenessOracle,
    expressions: list[tuple[str, str]],
) -> tuple[str, str] | None:
    for expression, detail in expressions:
        if oracle.resolves_to(expression, node):
            return expression, detail
    return None


def by_unique_id(node: HtmlElement, oracle: UniquenessOracle) -> Candidate | None:
    value = _raw_value(node, "id")
    if value is None:
        return None
    expression = any_element_with("id", value)
    if not oracle.resolves_to(expression, node):
        return None
    return Candidate(
        expression=expression,
        confidence=ConfidenceTier.RELIABLE,
        rationale="Unique id found; the most stable option.",
        strategy_id="unique_id",
    )


def by_unique_attribute(node: HtmlElement, oracle: UniquenessOracle) -> Candidate | None:
    options: list[tuple[str, str]] = []
    for attr in UNIQUE_ATTRIBUTES:
        value = _raw_value(node, attr)
        if value is not None:
            options.append((any_element_with(attr, value), attr))
    hit = _first_resolving(node, oracle, options)
    if hit is None:
        return None
    expression, attr = hit
    return Candidate(
        expression=expression,
        confidence=ConfidenceTier.RELIABLE,
        rationale=f"Unique attribute '{attr}' found.",
        strategy_id="unique_attribute",
    )


def by_exact_text(node: HtmlElement, oracle: UniquenessOracle) -> Candidate | None:
    content = text(node)
    if not EXACT_TEXT_MIN_EXCLUSIVE < len(content) < EXACT_TEXT_MAX_EXCLUSIVE:
        return None
    expression = f"//*[normalize-space(text())={xpath_literal(content)}]"
    if not oracle.resolves_to(expression, node):
        return None
    return Candidate(
        expression=expression,
        confidence=ConfidenceTier.CAUTION,
        rationale="Based on text; may break if the content changes.",
        strategy_id="exact_text",
    )


def by_unique_class(node: HtmlElement, oracle: UniquenessOracle) -> Candidate | None:
    # Literal @class equality: only single-token class attributes can match.
    options = [(any_element_with("class", token), token) for token in class_tokens(node)]
    hit = _first_resolving(node, oracle, options)
    if hit is None:
        return None
    expression, _token = hit
    return Candidate(
        expression=expression,
        confidence=ConfidenceTier.CAUTION,
        rationale="Unique class found; check that it is not generated.",
        strategy_id="unique_class",
    )


def by_position(node: HtmlElement, oracle: UniquenessOracle) -> Candidate | None:
    expression = build_positional_path(node, oracle)
    if not expression:
        return None
    return Candidate(
        expression=expression,
        confidence=ConfidenceTier.WEAK,
        rationale="Based on position; may break if the structure changes.",
        strategy_id="position",
    )


def by_absolute_path(node: HtmlElement, oracle: UniquenessOracle) -> Candidate | None:
    expression = build_absolute_path(node)
    if not expression:
        return None
    return Candidate(
        expression=expression,
        confidence=ConfidenceTier.WEAK,
        rationale="Absolute structural path; breaks easily.",
        strategy_id="absolute",
    )


def by_tag_and_unique_attribute(node: HtmlElement, oracle: UniquenessOracle) -> Candidate | None:
    tag = tag_name(node)
    options: list[tuple[str, str]] = []
    for attr in TAG_UNIQUE_ATTRIBUTES:
        value = _raw_value(node, attr)
        if value is not None:
            options.append((tag_with(tag, attribute_equals(attr, value)), attr))
    hit = _first_resolving(node, oracle, options)
    if hit is None:
        return None
    expression, attr = hit
    return Candidate(
        expression=expression,
        confidence=ConfidenceTier.RELIABLE,
        rationale=f"Tag {tag} with unique attribute {attr}.",
        strategy_id="tag_unique_attribute",
    )


def by_combined_attributes(node: HtmlElement, oracle: UniquenessOracle) -> Candidate | None:
    tag = tag_name(node)
    present = [(attr, _raw_value(node, attr)) for attr in COMBINABLE_ATTRIBUTES]
    options: list[tuple[str, str]] = []
    for (first, first_value), (second, second_value) in combinations(present, 2):
        if first_value is None or second_value is None:
            continue
        predicate = f"{attribute_equals(first, first_value)} and {attribute_equals(second, second_value)}"
        options.append((tag_with(tag, predicate), f"{first} and {second}"))
    hit = _first_resolving(node, oracle, options)
    if hit is None:
        return None
    expression, pair = hit
    return Candidate(
        expression=expression,
        confidence=ConfidenceTier.CAUTION,
        rationale=f"Based on the attribute combination {pair}.",
        strategy_id="combined_attributes",
    )


def by_partial_text(node: HtmlElement, oracle: UniquenessOracle) -> Candidate | None:
    content = text(node)
    if len(content) <= PARTIAL_TEXT_MIN_EXCLUSIVE:
        return None
    words = " ".join(content.split()[:PARTIAL_TEXT_WORDS])
    expression = f"//*[contains(text(),{xpath_literal(words)})]"
    if not oracle.resolves_to(expression, node):
        return None
    return Candidate(
        expression=expression,
        confidence=ConfidenceTier.CAUTION,
        rationale="Based on partial text; may break if the content changes.",
        strategy_id="partial_text",
    )


def by_tag_and_class(node: HtmlElement, oracle: UniquenessOracle) -> Candidate | None:
    tag = tag_name(node)
    options = [(tag_with(tag, attribute_equals("class", token)), token) for token in class_tokens(node)]
    hit = _first_resolving(node, oracle, options)
    if hit is None:
        return None
    expression, _token = hit
    return Candidate(
        expression=expression,
        confidence=ConfidenceTier.CAUTION,
        rationale=f"Tag {tag} with a specific class.",
        strategy_id="tag_class",
    )


def by_tag_and_attribute(node: HtmlElement, oracle: UniquenessOracle) -> Candidate | None:
    tag = tag_name(node)
    options: list[tuple[str, str]] = []
    for attr in TAG_OTHER_ATTRIBUTES:
        value = _raw_value(node, attr)
        if value is not None:
            options.append((tag_with(tag, attribute_equals(attr, value)), attr))
    hit = _first_resolving(node, oracle, options)
    if hit is None:
        return None
    expression, attr = hit
    return Candidate(
        expression=expression,
        confidence=ConfidenceTier.CAUTION,
        rationale=f"Based on tag {tag} and attribute {attr}.",
        strategy_id="tag_attribute",
    )


def by_tag_and_partial_class(node: HtmlElement, oracle: UniquenessOracle) -> Candidate | None:
    tokens = class_tokens(node)
    if not tokens:
        return None
    tag = tag_name(node)
    expression = tag_with(tag, f"contains(@class,{xpath_literal(tokens[0])})")
    if not oracle.resolves_to(expression, node):
        return None
    return Candidate(
        expression=expression,
        confidence=ConfidenceTier.WEAK,
        rationale="Tag with a partial class match.",
        strategy_id="tag_partial_class",
    )


ABSOLUTE = Strategy("absolute", ConfidenceTier.WEAK, by_absolute_path)

INITIAL_STRATEGIES: tuple[Strategy, ...] = (
    Strategy("unique_id", ConfidenceTier.RELIABLE, by_unique_id),
    Strategy("unique_attribute", ConfidenceTier.RELIABLE, by_unique_attribute),
    Strategy("exact_text", ConfidenceTier.CAUTION, by_exact_text),
    Strategy("unique_class", ConfidenceTier.CAUTION, by_unique_class),
    Strategy("position", ConfidenceTier.WEAK, by_position),
    ABSOLUTE,
)

EXTENDED_STRATEGIES: tuple[Strategy, ...] = (
    Strategy("tag_unique_attribute", ConfidenceTier.RELIABLE, by_tag_and_unique_attribute),
    Strategy("combined_attributes", ConfidenceTier.CAUTION, by_combined_attributes),
    Strategy("partial_text", ConfidenceTier.CAUTION, by_partial_text),
    Strategy("tag_class", ConfidenceTier.CAUTION, by_tag_and_class),
    Strategy("tag_attribute", ConfidenceTier.CAUTION, by_tag_and_attribute),
    Strategy("tag_partial_class", ConfidenceTier.WEAK, by_tag_and_partial_class),
    ABSOLUTE,
)


def strategy_by_id(strategy_id: str) -> Strategy | None:
    for strategy in (*INITIAL_STRATEGIES, *EXTENDED_STRATEGIES):
        if strategy.id == strategy_id:
            return strategy
    return None
