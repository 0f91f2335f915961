"""Call lifecycle notifications."""

from __future__ import annotations

from collections.abc import Awaitable, Sequence
import inspect
import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from chatbridge.types import ContentResponse, MessageContent

logger = logging.getLogger(__name__)


@runtime_checkable
class CallbackHandler(Protocol):
    """Receives one start and one end notification per successful call.

    Methods may be plain functions or coroutines.
    """

    def handle_generate_content_start(  # noqa: D102
        self, messages: Sequence[MessageContent]
    ) -> Awaitable[None] | None: ...

    def handle_generate_content_end(  # noqa: D102
        self, response: ContentResponse
    ) -> Awaitable[None] | None: ...


class LoggingCallbackHandler:
    """Log call boundaries at INFO."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def handle_generate_content_start(self, messages: Sequence[MessageContent]) -> None:
        self._log.info("generate_content start: %d message(s)", len(messages))

    def handle_generate_content_end(self, response: ContentResponse) -> None:
        self._log.info("generate_content end: %d choice(s)", len(response.choices))


async def resolve(result: Awaitable[Any] | Any) -> Any:
    """Await *result* if a sync-or-async callable handed back an awaitable."""
    if inspect.isawaitable(result):
        return await result
    return result
