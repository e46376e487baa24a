from pathlib import Path

from xpathinspect.config import (
    DEFAULT_HF_URL,
    DEFAULT_LOG_DIR,
    DEFAULT_OPENROUTER_MODEL,
    DEFAULT_PROVIDER_TIMEOUT,
    InspectorConfig,
)


def test_defaults_without_environment() -> None:
    config = InspectorConfig.from_env({})

    assert config.provider_timeout == DEFAULT_PROVIDER_TIMEOUT
    assert config.huggingface.url == DEFAULT_HF_URL
    assert config.huggingface.api_key is None
    assert config.openrouter.api_key is None
    assert config.openrouter.model == DEFAULT_OPENROUTER_MODEL
    assert config.log_dir == DEFAULT_LOG_DIR
    assert config.log_level == "INFO"


def test_environment_overrides(tmp_path: Path) -> None:
    config = InspectorConfig.from_env(
        {
            "XPATHINSPECT_PROVIDER_TIMEOUT": "2.5",
            "XPATHINSPECT_HF_TOKEN": " hf-token ",
            "XPATHINSPECT_OPENROUTER_KEY": "or-key",
            "XPATHINSPECT_OPENROUTER_MODEL": "custom/model",
            "XPATHINSPECT_LOG_DIR": str(tmp_path),
            "XPATHINSPECT_LOG_LEVEL": "debug",
        }
    )

    assert config.provider_timeout == 2.5
    assert config.huggingface.api_key == "hf-token"
    assert config.openrouter.api_key == "or-key"
    assert config.openrouter.model == "custom/model"
    assert config.log_dir == tmp_path
    assert config.log_level == "DEBUG"


def test_invalid_timeout_falls_back_to_default() -> None:
    assert InspectorConfig.from_env({"XPATHINSPECT_PROVIDER_TIMEOUT": "soon"}).provider_timeout == 10.0
    assert InspectorConfig.from_env({"XPATHINSPECT_PROVIDER_TIMEOUT": "-1"}).provider_timeout == 10.0
