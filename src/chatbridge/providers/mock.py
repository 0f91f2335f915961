"""Mock provider for testing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from chatbridge.callbacks import resolve
from chatbridge.options import CallOptions, merge_options
from chatbridge.providers.base import check_messages, generate_from_single_prompt
from chatbridge.types import ContentChoice, ContentResponse, TextContent

if TYPE_CHECKING:
    from collections.abc import Sequence

    from chatbridge.callbacks import CallbackHandler
    from chatbridge.types import MessageContent


class MockProvider:
    """Mock provider for offline use.

    Echoes the text of the last message. Streaming callbacks receive the echo
    word by word and may stop it early by returning ``False``. Messages are
    checked and lifecycle callbacks fire as with a real provider. Non-text
    parts are ignored, so images are never fetched.
    """

    def __init__(self, *, callbacks: CallbackHandler | None = None) -> None:
        self.callbacks = callbacks

    async def call(self, prompt: str, *options: CallOptions) -> str:
        """Echo *prompt* through generate_content."""
        return await generate_from_single_prompt(self, prompt, *options)

    async def generate_content(
        self,
        messages: Sequence[MessageContent],
        *options: CallOptions,
    ) -> ContentResponse:
        """Return a deterministic echo of the last message."""
        messages = list(messages)
        check_messages(messages)
        if self.callbacks is not None:
            await resolve(self.callbacks.handle_generate_content_start(messages))
        opts = merge_options(CallOptions(), *options)

        last = messages[-1]
        text = "".join(p.text for p in last.parts if isinstance(p, TextContent))
        echo = f"echo: {text[:100]}"

        if opts.streaming_func is not None:
            words = echo.split(" ")
            chunks = [f"{w} " for w in words[:-1]] + [words[-1]]
            emitted: list[str] = []
            for chunk in chunks:
                emitted.append(chunk)
                if await resolve(opts.streaming_func(chunk)) is False:
                    break
            echo = "".join(emitted)

        count = opts.candidate_count or 1
        response = ContentResponse(
            choices=[
                ContentChoice(
                    content=echo,
                    stop_reason="STOP",
                    generation_info={"input_tokens": 10, "total_tokens": 20},
                )
                for _ in range(count)
            ]
        )
        if self.callbacks is not None:
            await resolve(self.callbacks.handle_generate_content_end(response))
        return response
