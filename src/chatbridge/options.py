"""Per-call options and their overlay merge."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, fields, replace
from typing import Any

from chatbridge.errors import ConfigurationError
from chatbridge.types import Tool

#: Receives each streamed text chunk. Returning ``False`` stops the stream.
StreamingFunc = Callable[[str], Awaitable[bool | None] | bool | None]


@dataclass(frozen=True)
class CallOptions:
    """Options for a single generation call.

    Every field defaults to *None*, meaning "not set". Set fields overwrite
    the provider defaults, and later ``CallOptions`` overwrite earlier ones.
    """

    model: str | None = None
    candidate_count: int | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    top_k: int | None = None
    stop_words: tuple[str, ...] | None = None
    #: Enables streaming when set.
    streaming_func: StreamingFunc | None = None
    #: Mutually exclusive with a non-empty *response_mime_type*.
    json_mode: bool | None = None
    response_mime_type: str | None = None
    tools: tuple[Tool, ...] | None = None
    #: Deadline for the whole call, in seconds.
    timeout_s: float | None = None

    def __post_init__(self) -> None:
        """Validate option shapes early for clear errors."""
        if self.stop_words is not None:
            if isinstance(self.stop_words, str):
                raise ConfigurationError(
                    "stop_words must be a sequence of strings",
                    hint="Pass stop_words=('END',) rather than a bare string.",
                )
            object.__setattr__(self, "stop_words", tuple(self.stop_words))

        if self.tools is not None:
            tools = tuple(self.tools)
            for i, tool in enumerate(tools):
                if not isinstance(tool, Tool):
                    raise ConfigurationError(
                        f"tools[{i}] must be a Tool, got {type(tool).__name__}",
                        hint="Wrap declarations as Tool(type='function', function=...).",
                    )
            object.__setattr__(self, "tools", tools)

        for name in ("candidate_count", "max_tokens", "top_k"):
            value = getattr(self, name)
            if value is not None and (not isinstance(value, int) or value < 1):
                raise ConfigurationError(f"{name} must be a positive integer")

        if self.timeout_s is not None and self.timeout_s <= 0:
            raise ConfigurationError(
                "timeout_s must be positive",
                hint="Omit timeout_s to wait without a deadline.",
            )

    @property
    def streaming(self) -> bool:
        """Whether a streaming callback is configured."""
        return self.streaming_func is not None

    def merged(self, other: CallOptions) -> CallOptions:
        """Return a copy with every field set on *other* overwritten."""
        updates: dict[str, Any] = {
            f.name: getattr(other, f.name)
            for f in fields(other)
            if getattr(other, f.name) is not None
        }
        return replace(self, **updates) if updates else self


def merge_options(base: CallOptions, *overlays: CallOptions) -> CallOptions:
    """Overlay *overlays* onto *base* in order; later options win."""
    merged = base
    for overlay in overlays:
        merged = merged.merged(overlay)
    return merged
