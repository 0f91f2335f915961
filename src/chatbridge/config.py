"""Configuration: Frozen Config with provider defaults and credentials."""

from __future__ import annotations

from dataclasses import dataclass
import os

from dotenv import load_dotenv

from chatbridge.errors import ConfigurationError

load_dotenv()

# Checked in order; the first non-empty value wins.
_API_KEY_ENV_VARS: tuple[str, ...] = ("GEMINI_API_KEY", "GOOGLE_API_KEY")

# Names of google.genai.types.HarmBlockThreshold members.
HARM_THRESHOLDS: frozenset[str] = frozenset(
    {
        "HARM_BLOCK_THRESHOLD_UNSPECIFIED",
        "BLOCK_LOW_AND_ABOVE",
        "BLOCK_MEDIUM_AND_ABOVE",
        "BLOCK_ONLY_HIGH",
        "BLOCK_NONE",
        "OFF",
    }
)


@dataclass(frozen=True)
class Config:
    """Immutable provider configuration.

    The ``default_*`` fields are the base layer that per-call options are
    merged over. The API key is auto-resolved from the environment.

    Example:
        config = Config(default_model="gemini-2.0-flash")
        # API key is automatically resolved from GEMINI_API_KEY
    """

    #: Auto-resolved from ``GEMINI_API_KEY`` or ``GOOGLE_API_KEY`` when *None*.
    api_key: str | None = None
    default_model: str = "gemini-2.0-flash"
    default_candidate_count: int = 1
    default_max_tokens: int = 2048
    default_temperature: float = 0.5
    default_top_p: float = 0.95
    default_top_k: int = 3
    #: Applied to every harm category; per-category tuning is not supported.
    harm_threshold: str = "BLOCK_ONLY_HIGH"
    use_mock: bool = False

    def __post_init__(self) -> None:
        """Auto-resolve API key and validate configuration."""
        if not isinstance(self.default_model, str) or not self.default_model.strip():
            raise ConfigurationError(
                "default_model must be a non-empty string",
                hint="Pass default_model='gemini-2.0-flash'.",
            )
        object.__setattr__(self, "default_model", self.default_model.strip())

        if self.default_candidate_count < 1:
            raise ConfigurationError(
                f"default_candidate_count must be ≥ 1, got {self.default_candidate_count}"
            )
        if self.default_max_tokens < 1:
            raise ConfigurationError(
                f"default_max_tokens must be ≥ 1, got {self.default_max_tokens}"
            )
        if not 0.0 <= self.default_temperature <= 2.0:
            raise ConfigurationError(
                f"default_temperature must be within [0, 2], got {self.default_temperature}"
            )
        if not 0.0 <= self.default_top_p <= 1.0:
            raise ConfigurationError(
                f"default_top_p must be within [0, 1], got {self.default_top_p}"
            )
        if self.default_top_k < 1:
            raise ConfigurationError(
                f"default_top_k must be ≥ 1, got {self.default_top_k}"
            )
        if self.harm_threshold not in HARM_THRESHOLDS:
            raise ConfigurationError(
                f"Unknown harm_threshold: {self.harm_threshold!r}",
                hint=f"Supported thresholds: {', '.join(sorted(HARM_THRESHOLDS))}",
            )

        if self.api_key is None and not self.use_mock:
            resolved_key = next(
                (os.environ[name] for name in _API_KEY_ENV_VARS if os.environ.get(name)),
                None,
            )
            object.__setattr__(self, "api_key", resolved_key)

        if not self.use_mock and not self.api_key:
            raise ConfigurationError(
                "API key required for gemini",
                hint="Set GEMINI_API_KEY environment variable or pass api_key=...",
            )

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"Config(default_model={self.default_model!r}, "
            f"api_key={'[REDACTED]' if self.api_key else None}, use_mock={self.use_mock})"
        )

    __repr__ = __str__
