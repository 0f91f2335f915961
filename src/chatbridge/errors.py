"""Exception hierarchy for chatbridge."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class ChatBridgeError(Exception):
    """Base exception for all chatbridge errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(ChatBridgeError):
    """Configuration or call-option validation failed."""


class TranslationError(ChatBridgeError):
    """A request could not be translated into the vendor representation.

    Raised before any network interaction for malformed schemas, unsupported
    tool shapes and undecodable tool-call arguments.
    """


class UnsupportedRoleError(TranslationError):
    """A message role has no vendor mapping."""

    def __init__(self, role: object, *, hint: str | None = None) -> None:
        super().__init__(f"role {getattr(role, 'value', role)} not supported", hint=hint)
        self.role = role


class StreamShapeError(ChatBridgeError):
    """A stream event did not have the single-candidate shape aggregation expects."""


class NoContentError(ChatBridgeError):
    """A completed generation call returned no candidates."""

    def __init__(
        self,
        message: str = "no content in generation response",
        *,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)


class APIError(ChatBridgeError):
    """Upstream or transport call failed.

    Providers attach the HTTP status, phase and a retryable flag so callers can
    decide what to do without substring matching. chatbridge never retries.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        retryable: bool | None = None,
        status_code: int | None = None,
        provider: str | None = None,
        phase: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.retryable = retryable
        self.status_code = status_code
        self.provider = provider
        self.phase = phase


class RateLimitError(APIError):
    """Rate limit exceeded (HTTP 429)."""


class DeadlineExceededError(APIError):
    """The call did not finish within ``CallOptions.timeout_s``."""


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
