from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Callable, Literal

if TYPE_CHECKING:
    from lxml.html import HtmlElement

    from .oracle import UniquenessOracle
    from .request_guard import RequestGuard

AssistSource = Literal["provider", "local", "unchanged"]


class ConfidenceTier(IntEnum):
    WEAK = 1
    CAUTION = 2
    RELIABLE = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True, slots=True)
class Candidate:
    expression: str
    confidence: ConfidenceTier
    rationale: str
    strategy_id: str | None = None


Synthesizer = Callable[["HtmlElement", "UniquenessOracle"], "Candidate | None"]


@dataclass(frozen=True, slots=True)
class Strategy:
    id: str
    min_tier: ConfidenceTier
    synthesize: Synthesizer


@dataclass(slots=True)
class Session:
    selected_node: HtmlElement
    used_strategy_ids: set[str] = field(default_factory=set)
    current_candidate: Candidate | None = None
    surfaced_expressions: list[str] = field(default_factory=list)
    guard: RequestGuard | None = None

    def record(self, candidate: Candidate) -> None:
        if candidate.strategy_id:
            self.used_strategy_ids.add(candidate.strategy_id)
        self.current_candidate = candidate
        if candidate.expression not in self.surfaced_expressions:
            self.surfaced_expressions.append(candidate.expression)

    def has_surfaced(self, expression: str) -> bool:
        return expression in self.surfaced_expressions


@dataclass(frozen=True, slots=True)
class ElementDescription:
    tag: str
    id: str | None
    class_name: str | None
    attributes: tuple[tuple[str, str], ...]
    text: str | None
    parent_tag: str | None
    outer_html: str

    def attribute_map(self) -> dict[str, str]:
        return dict(self.attributes)


@dataclass(frozen=True, slots=True)
class AssistOutcome:
    candidate: Candidate | None
    source: AssistSource
    message: str
