from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Mapping

DEFAULT_PROVIDER_TIMEOUT = 10.0
DEFAULT_HF_URL = "https://api-inference.huggingface.co/models/microsoft/DialoGPT-medium"
DEFAULT_OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_OPENROUTER_MODEL = "openchat/openchat-7b:free"
DEFAULT_LOG_DIR = Path.home() / ".xpathinspect" / "logs"

_ENV_PREFIX = "XPATHINSPECT_"


@dataclass(frozen=True, slots=True)
class ProviderSettings:
    name: str
    url: str
    api_key: str | None = None
    model: str | None = None


@dataclass(frozen=True, slots=True)
class InspectorConfig:
    provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT
    huggingface: ProviderSettings = field(
        default_factory=lambda: ProviderSettings(name="huggingface", url=DEFAULT_HF_URL)
    )
    openrouter: ProviderSettings = field(
        default_factory=lambda: ProviderSettings(
            name="openrouter",
            url=DEFAULT_OPENROUTER_URL,
            model=DEFAULT_OPENROUTER_MODEL,
        )
    )
    log_dir: Path = DEFAULT_LOG_DIR
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> InspectorConfig:
        env = os.environ if environ is None else environ

        def read(key: str) -> str | None:
            value = str(env.get(f"{_ENV_PREFIX}{key}", "")).strip()
            return value or None

        return cls(
            provider_timeout=_positive_float(read("PROVIDER_TIMEOUT"), DEFAULT_PROVIDER_TIMEOUT),
            huggingface=ProviderSettings(
                name="huggingface",
                url=read("HF_URL") or DEFAULT_HF_URL,
                api_key=read("HF_TOKEN"),
            ),
            openrouter=ProviderSettings(
                name="openrouter",
                url=read("OPENROUTER_URL") or DEFAULT_OPENROUTER_URL,
                api_key=read("OPENROUTER_KEY"),
                model=read("OPENROUTER_MODEL") or DEFAULT_OPENROUTER_MODEL,
            ),
            log_dir=Path(read("LOG_DIR") or DEFAULT_LOG_DIR).expanduser(),
            log_level=(read("LOG_LEVEL") or "INFO").upper(),
        )


def _positive_float(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default
