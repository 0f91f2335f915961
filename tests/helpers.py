"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: the fake client mimics only the parts
of ``google.genai.Client.aio`` that GeminiProvider touches.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any

from google.genai import types

from chatbridge.config import Config
from chatbridge.providers.gemini import GeminiProvider
from chatbridge.types import ContentResponse, MessageContent

Scripted = types.GenerateContentResponse | BaseException


def text_candidate(
    *texts: str,
    finish_reason: types.FinishReason | None = None,
    token_count: int | None = None,
) -> types.Candidate:
    return types.Candidate(
        content=types.Content(
            role="model", parts=[types.Part.from_text(text=t) for t in texts]
        ),
        finish_reason=finish_reason,
        token_count=token_count,
    )


def usage(prompt: int, candidates: int) -> types.GenerateContentResponseUsageMetadata:
    return types.GenerateContentResponseUsageMetadata(
        prompt_token_count=prompt,
        candidates_token_count=candidates,
        total_token_count=prompt + candidates,
    )


def text_response(
    *texts: str,
    finish_reason: types.FinishReason | None = types.FinishReason.STOP,
    usage_metadata: types.GenerateContentResponseUsageMetadata | None = None,
) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[text_candidate(*texts, finish_reason=finish_reason)],
        usage_metadata=usage_metadata,
    )


async def scripted_stream(items: Iterable[Scripted]) -> AsyncIterator[types.GenerateContentResponse]:
    """Yield scripted events; exceptions are raised at their position."""
    for item in items:
        if isinstance(item, BaseException):
            raise item
        yield item


def _pop(script: list[Scripted]) -> types.GenerateContentResponse:
    item = script.pop(0)
    if isinstance(item, BaseException):
        raise item
    return item


@dataclass
class FakeGeminiClient:
    """Scripted stand-in for ``genai.Client``; records every call."""

    responses: list[Scripted] = field(default_factory=list)
    stream_events: list[Scripted] = field(default_factory=list)
    calls: list[dict[str, Any]] = field(default_factory=list)
    closed: bool = False

    def __post_init__(self) -> None:
        self.aio = SimpleNamespace(
            models=SimpleNamespace(
                generate_content=self._generate_content,
                generate_content_stream=self._generate_content_stream,
            ),
            chats=SimpleNamespace(create=self._create_chat),
            aclose=self._aclose,
        )

    def kinds(self) -> list[str]:
        return [c["kind"] for c in self.calls]

    async def _generate_content(self, *, model: str, contents: Any, config: Any) -> Any:
        self.calls.append(
            {"kind": "generate", "model": model, "contents": contents, "config": config}
        )
        return _pop(self.responses)

    async def _generate_content_stream(
        self, *, model: str, contents: Any, config: Any
    ) -> AsyncIterator[types.GenerateContentResponse]:
        self.calls.append(
            {"kind": "stream", "model": model, "contents": contents, "config": config}
        )
        return scripted_stream(self.stream_events)

    def _create_chat(self, *, model: str, config: Any = None, history: Any = None) -> Any:
        self.calls.append(
            {"kind": "chat.create", "model": model, "config": config, "history": history}
        )

        async def send_message(message: Any) -> Any:
            self.calls.append({"kind": "chat.send", "message": message})
            return _pop(self.responses)

        async def send_message_stream(message: Any) -> Any:
            self.calls.append({"kind": "chat.stream", "message": message})
            return scripted_stream(self.stream_events)

        return SimpleNamespace(
            send_message=send_message, send_message_stream=send_message_stream
        )

    async def _aclose(self) -> None:
        self.closed = True


@dataclass
class FakeImageFetcher:
    """ImageFetcher double returning a fixed payload or raising."""

    mime_type: str = "image/png"
    data: bytes = b"\x89PNG\r\n\x1a\nfake"
    error: BaseException | None = None
    urls: list[str] = field(default_factory=list)

    async def fetch(self, url: str) -> tuple[str, bytes]:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.mime_type, self.data


@dataclass
class RecordingCallbacks:
    """CallbackHandler that records what it was notified with."""

    started: list[list[MessageContent]] = field(default_factory=list)
    ended: list[ContentResponse] = field(default_factory=list)

    def handle_generate_content_start(self, messages: list[MessageContent]) -> None:
        self.started.append(list(messages))

    async def handle_generate_content_end(self, response: ContentResponse) -> None:
        self.ended.append(response)


def make_provider(
    client: FakeGeminiClient,
    config: Config | None = None,
    **kwargs: Any,
) -> GeminiProvider:
    """GeminiProvider wired to *client* instead of the real SDK."""
    provider = GeminiProvider(
        config or Config(api_key="test-key"),
        image_fetcher=kwargs.pop("image_fetcher", FakeImageFetcher()),
        **kwargs,
    )
    provider._client = client
    return provider
