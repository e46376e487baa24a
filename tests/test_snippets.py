import pytest

from xpathinspect.models import ConfidenceTier
from xpathinspect.snippets import FRAMEWORKS, render_snippet


def test_every_framework_renders_the_expression() -> None:
    for framework in FRAMEWORKS:
        snippet = render_snippet("//*[@data-testid='save']", framework)
        assert "//*[@data-testid='save']" in snippet
        assert "Status: Reliable (green)" in snippet.splitlines()[0]


def test_selenium_python_snippet() -> None:
    snippet = render_snippet("//*[@class='primary']", "selenium-python")

    assert snippet.splitlines()[0] == "# Status: Caution (yellow)"
    assert 'driver.find_element(By.XPATH, "//*[@class=\'primary\']")' in snippet


def test_framework_names_are_case_insensitive() -> None:
    snippet = render_snippet("/html[1]/body[1]", " Cypress ")

    assert snippet.startswith("// Status: Weak (red)")
    assert 'cy.xpath("/html[1]/body[1]").click();' in snippet


def test_unknown_framework_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported framework"):
        render_snippet("//a", "webdriverio")


def test_status_line_follows_given_tier() -> None:
    snippet = render_snippet("//button[@title='Close']", "cypress", ConfidenceTier.RELIABLE)

    assert snippet.startswith("// Status: Reliable (green)")
    assert render_snippet("//button[@title='Close']", "cypress").startswith("// Status: Weak (red)")
