"""Stream aggregation and candidate normalization for Gemini responses.

Streaming assumes a single candidate: every event carries zero or one
candidate, and the parts of successive events are concatenated into one
accumulated candidate before normalization.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
import contextlib
from dataclasses import dataclass, field
import json
import logging

from google.genai import types

from chatbridge.callbacks import resolve
from chatbridge.errors import ChatBridgeError, StreamShapeError
from chatbridge.options import StreamingFunc
from chatbridge.providers._errors import wrap_provider_error
from chatbridge.types import ContentChoice, ContentResponse, ToolCall

logger = logging.getLogger(__name__)

CITATIONS = "citations"
SAFETY = "safety"
THOUGHTS = "thoughts"


def _stop_reason(reason: types.FinishReason | str | None) -> str:
    if reason is None:
        return ""
    return str(getattr(reason, "value", reason))


def convert_candidates(
    candidates: Sequence[types.Candidate],
    usage: types.GenerateContentResponseUsageMetadata | None,
) -> ContentResponse:
    """Normalize candidates into choices, preserving their order."""
    response = ContentResponse()
    for candidate in candidates:
        text: list[str] = []
        thoughts: list[str] = []
        tool_calls: list[ToolCall] = []

        parts = candidate.content.parts if candidate.content is not None else None
        for part in parts or ():
            if part.function_call is not None:
                fc = part.function_call
                tool_calls.append(
                    ToolCall(
                        name=fc.name or "",
                        arguments=json.dumps(fc.args or {}),
                        id=fc.id,
                    )
                )
            elif part.text is not None:
                (thoughts if part.thought else text).append(part.text)
            else:
                logger.debug("Skipping unsupported response part: %r", part)

        metadata: dict[str, object] = {
            CITATIONS: candidate.citation_metadata,
            SAFETY: candidate.safety_ratings,
        }
        if thoughts:
            metadata[THOUGHTS] = "".join(thoughts)
        if usage is not None:
            metadata["input_tokens"] = usage.prompt_token_count or 0
            metadata["output_tokens"] = usage.candidates_token_count or 0
            metadata["total_tokens"] = usage.total_token_count or 0

        response.choices.append(
            ContentChoice(
                content="".join(text),
                stop_reason=_stop_reason(candidate.finish_reason),
                generation_info=metadata,
                tool_calls=tool_calls,
            )
        )
    return response


class ResponseStream:
    """Pull-based view of a Gemini response stream.

    Gemini reports cumulative usage on stream events; the latest report seen
    is the merged usage for the whole stream.
    """

    def __init__(self, source: AsyncIterator[types.GenerateContentResponse]) -> None:
        self._source = source
        self._usage: types.GenerateContentResponseUsageMetadata | None = None

    def __aiter__(self) -> ResponseStream:
        return self

    async def __anext__(self) -> types.GenerateContentResponse:
        event = await anext(self._source)
        if event.usage_metadata is not None:
            self._usage = event.usage_metadata
        return event

    async def aclose(self) -> None:
        """Close the underlying vendor stream and its HTTP response."""
        closer = getattr(self._source, "aclose", None)
        if closer is not None:
            await closer()

    def merged_usage(self) -> types.GenerateContentResponseUsageMetadata | None:
        """Usage metadata for everything pulled so far."""
        return self._usage


@dataclass
class StreamAccumulator:
    """The candidate being assembled while a stream drains."""

    parts: list[types.Part] = field(default_factory=list)
    role: str | None = None
    finish_reason: types.FinishReason | None = None
    safety_ratings: list[types.SafetyRating] | None = None
    citation_metadata: types.CitationMetadata | None = None
    token_count: int = 0

    def absorb(self, candidate: types.Candidate) -> None:
        """Append parts; metadata is last-write-wins, token count adds up."""
        content = candidate.content
        if content is not None:
            self.parts.extend(content.parts or ())
            self.role = content.role
        self.finish_reason = candidate.finish_reason
        self.safety_ratings = candidate.safety_ratings
        self.citation_metadata = candidate.citation_metadata
        self.token_count += candidate.token_count or 0

    def to_candidate(self) -> types.Candidate:
        return types.Candidate(
            content=types.Content(role=self.role, parts=list(self.parts)),
            finish_reason=self.finish_reason,
            safety_ratings=self.safety_ratings,
            citation_metadata=self.citation_metadata,
            token_count=self.token_count,
        )


async def _pull(stream: ResponseStream) -> types.GenerateContentResponse | None:
    """Return the next event, or None once the stream is exhausted."""
    try:
        return await anext(stream)
    except StopAsyncIteration:
        return None
    except asyncio.CancelledError:
        raise
    except ChatBridgeError:
        raise
    except Exception as e:
        raise wrap_provider_error(e, phase="stream") from e


async def drain_stream(
    stream: ResponseStream, streaming_func: StreamingFunc
) -> ContentResponse:
    """Drain *stream* into one response, feeding text chunks to *streaming_func*.

    Draining stops when the stream ends, when an event carries no content, or
    when *streaming_func* returns ``False``. The candidate accumulated up to
    that point is always returned. The stream is closed on every exit path.
    """
    acc = StreamAccumulator()
    events = 0
    reason = "exhausted"
    async with contextlib.aclosing(stream):
        while (event := await _pull(stream)) is not None:
            events += 1
            candidates = event.candidates or []
            if len(candidates) > 1:
                raise StreamShapeError(
                    f"expect single candidate in stream mode; got {len(candidates)}",
                    hint="Streaming supports candidate_count=1 only.",
                )
            if not candidates or candidates[0].content is None:
                reason = "empty event"
                break

            candidate = candidates[0]
            acc.absorb(candidate)

            aborted = False
            for part in candidate.content.parts or ():  # type: ignore[union-attr]
                if part.text is None or part.thought:
                    continue
                if await resolve(streaming_func(part.text)) is False:
                    aborted = True
                    break
            if aborted:
                reason = "callback abort"
                break

    logger.debug("Stream drained after %d event(s): %s", events, reason)
    return convert_candidates([acc.to_candidate()], stream.merged_usage())
