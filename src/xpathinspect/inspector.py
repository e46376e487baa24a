from __future__ import annotations

import logging

from lxml.html import HtmlElement

from .errors import InspectorError
from .models import AssistOutcome, Candidate, ConfidenceTier, Session
from .oracle import DocumentOracle, UniquenessOracle
from .providers import ProviderChain
from .request_guard import RequestGuard
from .session import regenerate, select_node
from .snippets import render_snippet
from .tree import describe_element
from .validation import ExternalValidation, validate_external_candidate

logger = logging.getLogger("xpathinspect.engine")


class LocatorInspector:
    """Entry point for the selection, regeneration and external-locator triggers.

    Holds at most one Session; selecting a node replaces it wholesale.
    """

    def __init__(self, oracle: UniquenessOracle, provider_chain: ProviderChain | None = None) -> None:
        self.oracle = oracle
        self.provider_chain = provider_chain
        self.session: Session | None = None

    @classmethod
    def for_document(
        cls,
        document_root: HtmlElement,
        provider_chain: ProviderChain | None = None,
    ) -> LocatorInspector:
        return cls(DocumentOracle(document_root), provider_chain)

    @property
    def current(self) -> Candidate | None:
        if self.session is None:
            return None
        return self.session.current_candidate

    def on_node_selected(self, node: HtmlElement) -> Candidate:
        session = select_node(node, self.oracle)
        self.session = session
        assert session.current_candidate is not None
        return session.current_candidate

    def on_regenerate_requested(self, min_tier: ConfidenceTier | None = None) -> Candidate | None:
        session = self._require_session()
        floor = min_tier or session.current_candidate.confidence  # type: ignore[union-attr]
        return self._guard(session).run("regeneration", lambda: regenerate(session, floor, self.oracle))

    def submit_external_candidate(self, raw_expression: str | None) -> ExternalValidation:
        session = self._require_session()
        verdict = validate_external_candidate(raw_expression, self.oracle, session.selected_node)
        if verdict.accepted and verdict.candidate is not None:
            session.record(verdict.candidate)
            logger.info("Accepted external locator %s", verdict.candidate.expression)
        else:
            logger.info("Rejected external locator %r: %s", raw_expression, verdict.message)
        return verdict

    async def generate_with_provider(self) -> AssistOutcome:
        session = self._require_session()
        return await self._guard(session).run_async("provider", lambda: self._assist(session))

    def snippet(self, framework: str) -> str:
        candidate = self.current
        if candidate is None:
            raise InspectorError("No locator has been generated yet.")
        return render_snippet(candidate.expression, framework, candidate.confidence)

    async def _assist(self, session: Session) -> AssistOutcome:
        suggestion: str | None = None
        if self.provider_chain is not None:
            suggestion = await self.provider_chain.suggest(describe_element(session.selected_node))

        if self.session is not session:
            return AssistOutcome(None, "unchanged", "Selection changed while the provider was running.")

        if suggestion:
            verdict = self.submit_external_candidate(suggestion)
            if verdict.accepted and verdict.candidate is not None:
                return AssistOutcome(verdict.candidate, "provider", "Locator suggested by provider and verified.")

        floor = session.current_candidate.confidence  # type: ignore[union-attr]
        regenerated = regenerate(session, floor, self.oracle)
        if regenerated is not None:
            return AssistOutcome(regenerated, "local", "Provider unavailable. Using local generation.")
        logger.warning("Provider and local regeneration both failed; keeping current locator.")
        return AssistOutcome(
            session.current_candidate,
            "unchanged",
            "No better alternative found. Keeping current locator.",
        )

    def _require_session(self) -> Session:
        if self.session is None or self.session.current_candidate is None:
            raise InspectorError("Select an element before requesting a new locator.")
        return self.session

    @staticmethod
    def _guard(session: Session) -> RequestGuard:
        if session.guard is None:
            session.guard = RequestGuard()
        return session.guard
