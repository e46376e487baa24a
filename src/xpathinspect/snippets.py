from __future__ import annotations

from typing import Callable

from .confidence import status_text, tier_status
from .models import ConfidenceTier


def _cypress(expression: str, status: str) -> str:
    return "\n".join(
        [
            f"// Status: {status}",
            f'cy.xpath("{expression}").click();',
            "",
            "// Or wait for the element",
            f"cy.xpath(\"{expression}\").should('be.visible');",
            "",
            "// Read its text",
            f"cy.xpath(\"{expression}\").invoke('text').then((text) => {{",
            "  cy.log(text);",
            "});",
        ]
    )


def _selenium_java(expression: str, status: str) -> str:
    return "\n".join(
        [
            f"// Status: {status}",
            f'WebElement element = driver.findElement(By.xpath("{expression}"));',
            "element.click();",
            "",
            "// Or with an explicit wait",
            "WebDriverWait wait = new WebDriverWait(driver, Duration.ofSeconds(10));",
            "WebElement waited = wait.until("
            f'ExpectedConditions.elementToBeClickable(By.xpath("{expression}")));',
            "waited.click();",
        ]
    )


def _selenium_python(expression: str, status: str) -> str:
    return "\n".join(
        [
            f"# Status: {status}",
            f'element = driver.find_element(By.XPATH, "{expression}")',
            "element.click()",
            "",
            "# Or with an explicit wait",
            "from selenium.webdriver.support.wait import WebDriverWait",
            "from selenium.webdriver.support import expected_conditions as EC",
            "",
            "element = WebDriverWait(driver, 10).until(",
            f'    EC.element_to_be_clickable((By.XPATH, "{expression}"))',
            ")",
            "element.click()",
        ]
    )


def _playwright(expression: str, status: str) -> str:
    return "\n".join(
        [
            f"// Status: {status}",
            f"await page.locator('xpath={expression}').click();",
            "",
            "// Or wait for the element",
            f"await page.locator('xpath={expression}').waitFor();",
            "",
            "// Read its text",
            f"const text = await page.locator('xpath={expression}').textContent();",
            "console.log(text);",
        ]
    )


_RENDERERS: dict[str, Callable[[str, str], str]] = {
    "cypress": _cypress,
    "selenium-java": _selenium_java,
    "selenium-python": _selenium_python,
    "playwright": _playwright,
}

FRAMEWORKS: tuple[str, ...] = tuple(_RENDERERS)


def render_snippet(expression: str, framework: str, confidence: ConfidenceTier | None = None) -> str:
    key = str(framework or "").strip().lower()
    renderer = _RENDERERS.get(key)
    if renderer is None:
        raise ValueError(f"Unsupported framework: {framework!r}. Expected one of {', '.join(FRAMEWORKS)}.")
    status = tier_status(confidence) if confidence is not None else status_text(expression)
    return renderer(expression, status)
