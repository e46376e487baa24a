from __future__ import annotations

from dataclasses import replace
import logging
from typing import TYPE_CHECKING, Sequence

from lxml.html import HtmlElement

from .errors import NoCandidateFound
from .models import Candidate, ConfidenceTier, Session, Strategy
from .request_guard import RequestGuard
from .strategies import EXTENDED_STRATEGIES, INITIAL_STRATEGIES

if TYPE_CHECKING:
    from .oracle import UniquenessOracle

logger = logging.getLogger("xpathinspect.engine")


def select_node(node: HtmlElement, oracle: UniquenessOracle) -> Session:
    session = Session(selected_node=node, guard=RequestGuard())
    generate_initial(session, oracle)
    return session


def generate_initial(
    session: Session,
    oracle: UniquenessOracle,
    strategies: Sequence[Strategy] = INITIAL_STRATEGIES,
) -> Candidate:
    """Run the fixed-order bank and keep the first candidate that resolves to the node.

    Exhausted-strategy memory is cleared first, so a strategy consumed for a
    previous selection is eligible again.
    """
    session.used_strategy_ids.clear()
    session.surfaced_expressions.clear()
    session.current_candidate = None

    node = session.selected_node
    for strategy in strategies:
        candidate = strategy.synthesize(node, oracle)
        if candidate is None:
            continue
        if not oracle.resolves_to(candidate.expression, node):
            logger.debug("Strategy %s produced non-unique %r", strategy.id, candidate.expression)
            continue
        chosen = replace(candidate, strategy_id=strategy.id)
        session.record(chosen)
        logger.info("Generated %s via %s (%s)", chosen.expression, strategy.id, chosen.confidence.label)
        return chosen

    raise NoCandidateFound("Selected node is not attached to the evaluated document.")


def regenerate(
    session: Session,
    min_tier: ConfidenceTier,
    oracle: UniquenessOracle,
    strategies: Sequence[Strategy] = EXTENDED_STRATEGIES,
) -> Candidate | None:
    node = session.selected_node
    eligible = [
        strategy
        for strategy in strategies
        if strategy.min_tier >= min_tier and strategy.id not in session.used_strategy_ids
    ]

    for strategy in eligible:
        candidate = strategy.synthesize(node, oracle)
        if candidate is None:
            continue
        if session.has_surfaced(candidate.expression):
            continue
        if not oracle.resolves_to(candidate.expression, node):
            continue
        chosen = replace(candidate, strategy_id=strategy.id)
        session.record(chosen)
        logger.info("Regenerated %s via %s (%s)", chosen.expression, strategy.id, chosen.confidence.label)
        return chosen

    logger.info("Regeneration exhausted at tier %s; keeping current locator.", min_tier.label)
    return None
