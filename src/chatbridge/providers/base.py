"""Provider protocol: the uniform interface every backend implements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from chatbridge.errors import NoContentError, TranslationError
from chatbridge.types import ChatMessageType, human_message

if TYPE_CHECKING:
    from collections.abc import Sequence

    from chatbridge.options import CallOptions
    from chatbridge.types import ContentResponse, MessageContent


@runtime_checkable
class Provider(Protocol):
    """Minimal provider protocol: generate_content and call."""

    async def generate_content(
        self,
        messages: Sequence[MessageContent],
        *options: CallOptions,
    ) -> ContentResponse:
        """Generate a response for *messages*; options overlay in order."""
        ...

    async def call(self, prompt: str, *options: CallOptions) -> str:
        """Generate from a single human prompt and return the first choice's text."""
        ...


async def generate_from_single_prompt(
    provider: Provider, prompt: str, *options: CallOptions
) -> str:
    """Send *prompt* as one Human message and return the first choice's content."""
    response = await provider.generate_content([human_message(prompt)], *options)
    if not response.choices:
        raise NoContentError()
    return response.choices[0].content


def check_messages(messages: Sequence[MessageContent]) -> None:
    """Enforce the dispatch rule every provider shares.

    A lone message must come from the human. With several messages the last
    one is the request whatever its role.
    """
    if not messages:
        raise TranslationError("at least one message is required")
    if len(messages) == 1 and messages[0].role != ChatMessageType.HUMAN:
        role = messages[0].role
        raise TranslationError(
            f"got {getattr(role, 'value', role)} message role, want human",
            hint="A lone message must have the HUMAN role.",
        )
