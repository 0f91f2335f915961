"""Configuration boundary tests."""

from __future__ import annotations

import pytest

from chatbridge.config import Config
from chatbridge.errors import ConfigurationError

pytestmark = pytest.mark.unit


def test_config_defaults(gemini_model: str) -> None:
    cfg = Config(api_key="k")

    assert cfg.default_model == gemini_model
    assert cfg.default_candidate_count == 1
    assert cfg.default_max_tokens == 2048
    assert cfg.default_temperature == 0.5
    assert cfg.default_top_p == 0.95
    assert cfg.default_top_k == 3
    assert cfg.harm_threshold == "BLOCK_ONLY_HIGH"
    assert cfg.use_mock is False


def test_config_creation_with_mock_mode(gemini_model: str) -> None:
    """Config can be created with mock mode (no API key needed)."""
    cfg = Config(default_model=gemini_model, use_mock=True)
    assert cfg.default_model == gemini_model
    assert cfg.api_key is None


def test_config_auto_resolves_api_key_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """API key should be auto-resolved from environment."""
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")

    assert Config().api_key == "env-key"


def test_google_api_key_is_a_fallback(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", "google-key")

    assert Config().api_key == "google-key"

    monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")

    assert Config().api_key == "gemini-key"


def test_explicit_api_key_takes_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    """Explicit api_key should override env."""
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")

    assert Config(api_key="explicit-key").api_key == "explicit-key"


def test_missing_api_key_raises_clear_error() -> None:
    """Missing API key without mock mode must fail clearly."""
    with pytest.raises(ConfigurationError, match="API key required") as exc:
        Config()
    assert exc.value.hint is not None
    assert "GEMINI_API_KEY" in exc.value.hint


def test_model_name_is_stripped() -> None:
    assert Config(api_key="k", default_model="  gemini-2.5-pro ").default_model == "gemini-2.5-pro"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"default_model": ""},
        {"default_candidate_count": 0},
        {"default_max_tokens": 0},
        {"default_temperature": 2.5},
        {"default_top_p": -0.1},
        {"default_top_k": 0},
    ],
)
def test_invalid_defaults_are_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(ConfigurationError):
        Config(api_key="k", **kwargs)  # type: ignore[arg-type]


def test_unknown_harm_threshold_raises_error() -> None:
    with pytest.raises(ConfigurationError, match="Unknown harm_threshold") as exc:
        Config(api_key="k", harm_threshold="BLOCK_EVERYTHING")
    assert "BLOCK_ONLY_HIGH" in (exc.value.hint or "")


def test_config_str_and_repr_redact_api_key(gemini_model: str) -> None:
    """String representations must not leak secrets."""
    secret = "top-secret-key"
    cfg = Config(default_model=gemini_model, api_key=secret)

    assert secret not in str(cfg)
    assert secret not in repr(cfg)
    assert "[REDACTED]" in str(cfg)
