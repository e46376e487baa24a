from __future__ import annotations

import re

from .models import ConfidenceTier

_LITERAL = r"""(?:'[^']*'|"[^"]*"|concat\([^\]]*\))"""

_ID_ONLY_PATTERN = re.compile(
    rf"^//(?:\*|[A-Za-z_][\w.-]*)\[\s*@id\s*=\s*{_LITERAL}\s*\]$"
)

_RELIABLE_ATTR_PATTERN = re.compile(r"@(?:data-testid|aria-label)(?![\w-])|@(?:data-test|name)\s*=")

_CAUTION_PATTERNS = (
    re.compile(r"@class\b"),
    re.compile(r"\btext\(\)"),
    re.compile(r"\bcontains\("),
)

_STATUS_TEXT = {
    ConfidenceTier.RELIABLE: "Reliable (green)",
    ConfidenceTier.CAUTION: "Caution (yellow)",
    ConfidenceTier.WEAK: "Weak (red)",
}


def classify(expression: str) -> ConfidenceTier:
    text = str(expression or "").strip()
    if not text:
        return ConfidenceTier.WEAK

    if _ID_ONLY_PATTERN.fullmatch(text):
        return ConfidenceTier.RELIABLE
    if _RELIABLE_ATTR_PATTERN.search(text):
        return ConfidenceTier.RELIABLE
    if any(pattern.search(text) for pattern in _CAUTION_PATTERNS):
        return ConfidenceTier.CAUTION
    return ConfidenceTier.WEAK


def tier_from_label(label: str | int | ConfidenceTier | None) -> ConfidenceTier:
    if isinstance(label, ConfidenceTier):
        return label
    if isinstance(label, int):
        try:
            return ConfidenceTier(label)
        except ValueError:
            return ConfidenceTier.WEAK
    normalized = str(label or "").strip().upper()
    return ConfidenceTier.__members__.get(normalized, ConfidenceTier.WEAK)


def tier_status(tier: ConfidenceTier) -> str:
    return _STATUS_TEXT[tier]


def status_text(expression: str) -> str:
    return tier_status(classify(expression))
