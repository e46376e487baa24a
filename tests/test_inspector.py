import asyncio

import pytest

from xpathinspect.errors import InspectorError, NoCandidateFound, RequestInFlight
from xpathinspect.inspector import LocatorInspector
from xpathinspect.models import ConfidenceTier
from xpathinspect.tree import load_document

HTML = """
<html><body>
  <button data-testid="save" class="primary">Save</button>
  <button>Cancel</button>
  <p id="note">Remember to save</p>
</body></html>
"""


class FakeChain:
    def __init__(self, suggestion: str | None, on_call=None) -> None:
        self.suggestion = suggestion
        self.on_call = on_call
        self.descriptions = []

    async def suggest(self, description):
        self.descriptions.append(description)
        if self.on_call is not None:
            self.on_call()
        return self.suggestion


def _inspector(chain=None):
    document = load_document(HTML)
    return LocatorInspector.for_document(document, chain), document


def test_selection_produces_current_locator() -> None:
    inspector, document = _inspector()

    candidate = inspector.on_node_selected(document.xpath("//button")[0])

    assert candidate.expression == "//*[@data-testid='save']"
    assert inspector.current == candidate


def test_requests_before_selection_are_rejected() -> None:
    inspector, _document = _inspector()

    assert inspector.current is None
    with pytest.raises(InspectorError):
        inspector.on_regenerate_requested()
    with pytest.raises(InspectorError):
        inspector.snippet("cypress")


def test_regenerate_uses_current_tier_by_default() -> None:
    inspector, document = _inspector()
    inspector.on_node_selected(document.xpath("//button")[0])

    alternative = inspector.on_regenerate_requested()

    assert alternative is not None
    assert alternative.expression == "//button[@data-testid='save']"
    assert alternative.confidence is ConfidenceTier.RELIABLE
    assert inspector.on_regenerate_requested() is None
    assert inspector.current == alternative
    assert inspector.session.guard.busy is False


def test_regenerate_accepts_explicit_floor() -> None:
    inspector, document = _inspector()
    inspector.on_node_selected(document.xpath("//button")[0])

    alternative = inspector.on_regenerate_requested(ConfidenceTier.CAUTION)

    assert alternative is not None
    assert alternative.strategy_id == "tag_unique_attribute"


def test_busy_guard_rejects_overlapping_requests() -> None:
    inspector, document = _inspector(FakeChain(None))
    inspector.on_node_selected(document.xpath("//button")[0])
    inspector.session.guard.busy = True

    with pytest.raises(RequestInFlight):
        inspector.on_regenerate_requested()
    with pytest.raises(RequestInFlight):
        asyncio.run(inspector.generate_with_provider())


def test_new_selection_replaces_session() -> None:
    inspector, document = _inspector()
    inspector.on_node_selected(document.xpath("//button")[0])
    first_session = inspector.session

    candidate = inspector.on_node_selected(document.xpath("//p")[0])

    assert inspector.session is not first_session
    assert candidate.expression == "//*[@id='note']"
    assert inspector.session.used_strategy_ids == {"unique_id"}


def test_failed_selection_keeps_previous_session() -> None:
    inspector, document = _inspector()
    inspector.on_node_selected(document.xpath("//button")[0])
    previous = inspector.session
    stray = load_document("<html><body><aside><i>x</i></aside></body></html>").xpath("//i")[0]

    with pytest.raises(NoCandidateFound):
        inspector.on_node_selected(stray)

    assert inspector.session is previous


def test_external_candidate_replaces_current_only_when_accepted() -> None:
    inspector, document = _inspector()
    initial = inspector.on_node_selected(document.xpath("//button")[0])

    rejected = inspector.submit_external_candidate("//button")
    assert not rejected.accepted
    assert inspector.current == initial

    accepted = inspector.submit_external_candidate("//button[text()='Save']")
    assert accepted.accepted
    assert inspector.current == accepted.candidate
    assert inspector.current.confidence is ConfidenceTier.CAUTION


def test_provider_suggestion_is_verified_and_used() -> None:
    chain = FakeChain("```\n//button[@data-testid='save']\n```")
    inspector, document = _inspector(chain)
    inspector.on_node_selected(document.xpath("//button")[0])

    outcome = asyncio.run(inspector.generate_with_provider())

    assert outcome.source == "provider"
    assert outcome.candidate.expression == "//button[@data-testid='save']"
    assert outcome.message == "Locator suggested by provider and verified."
    assert chain.descriptions[0].tag == "button"
    assert inspector.session.guard.busy is False


def test_missing_provider_answer_falls_back_to_local() -> None:
    inspector, document = _inspector(FakeChain(None))
    inspector.on_node_selected(document.xpath("//button")[0])

    outcome = asyncio.run(inspector.generate_with_provider())

    assert outcome.source == "local"
    assert outcome.candidate.expression == "//button[@data-testid='save']"
    assert outcome.message == "Provider unavailable. Using local generation."


def test_rejected_provider_answer_falls_back_to_local() -> None:
    inspector, document = _inspector(FakeChain("//button"))
    inspector.on_node_selected(document.xpath("//button")[0])

    outcome = asyncio.run(inspector.generate_with_provider())

    assert outcome.source == "local"


def test_exhausted_assist_keeps_current_locator() -> None:
    inspector, document = _inspector(FakeChain(None))
    inspector.on_node_selected(document.xpath("//button")[0])
    asyncio.run(inspector.generate_with_provider())
    current = inspector.current

    outcome = asyncio.run(inspector.generate_with_provider())

    assert outcome.source == "unchanged"
    assert outcome.candidate == current
    assert outcome.message == "No better alternative found. Keeping current locator."


def test_assist_without_chain_uses_local_generation() -> None:
    inspector, document = _inspector()
    inspector.on_node_selected(document.xpath("//button")[0])

    outcome = asyncio.run(inspector.generate_with_provider())

    assert outcome.source == "local"


def test_selection_change_during_provider_call_is_discarded() -> None:
    document = load_document(HTML)
    inspector = LocatorInspector.for_document(document)
    inspector.provider_chain = FakeChain(
        "//button[@data-testid='save']",
        on_call=lambda: inspector.on_node_selected(document.xpath("//p")[0]),
    )
    inspector.on_node_selected(document.xpath("//button")[0])

    outcome = asyncio.run(inspector.generate_with_provider())

    assert outcome.source == "unchanged"
    assert outcome.candidate is None
    assert inspector.current.expression == "//*[@id='note']"


def test_snippet_uses_current_locator() -> None:
    inspector, document = _inspector()
    inspector.on_node_selected(document.xpath("//p")[0])

    snippet = inspector.snippet("playwright")

    assert "page.locator('xpath=//*[@id='note']')" in snippet
    assert snippet.startswith("// Status: Reliable (green)")


def test_snippet_status_matches_displayed_tier() -> None:
    document = load_document('<html><body><button title="Close">X</button></body></html>')
    inspector = LocatorInspector.for_document(document)
    inspector.on_node_selected(document.xpath("//button")[0])

    alternative = inspector.on_regenerate_requested()

    assert alternative.expression == "//button[@title='Close']"
    assert alternative.confidence is ConfidenceTier.RELIABLE
    assert inspector.snippet("selenium-python").startswith("# Status: Reliable (green)")


def test_busy_guard_names_the_running_request() -> None:
    inspector, document = _inspector()
    inspector.on_node_selected(document.xpath("//button")[0])
    inspector.session.guard.acquire("provider")

    with pytest.raises(RequestInFlight, match="provider request is still running"):
        inspector.on_regenerate_requested()
