"""Mapping of Gemini SDK and transport failures into APIError.

Every vendor interaction happens in one of three phases: the batch call
(``generate``), opening or pulling a response stream (``stream``), or
downloading an image referenced by a content part (``image_fetch``). The
phase, HTTP status and a retryable flag are attached so callers can tell a
quota problem from a dead socket without parsing messages.
"""

from __future__ import annotations

import asyncio
from typing import Literal

import httpx

from chatbridge._http import RETRYABLE_STATUS_CODES
from chatbridge.errors import APIError, RateLimitError, _walk_exception_chain

PROVIDER = "gemini"

Phase = Literal["generate", "stream", "image_fetch"]

_PHASE_MESSAGES: dict[str, str] = {
    "generate": "Gemini generate failed",
    "stream": "error in stream mode",
    "image_fetch": "Image fetch failed",
}


def extract_status_code(exc: BaseException) -> int | None:
    """Find an HTTP status on *exc* or anything it was raised from.

    ``google.genai.errors.APIError`` exposes it as ``code``; httpx status
    errors carry it on ``response``.
    """
    for e in _walk_exception_chain(exc):
        candidates = (
            getattr(e, "code", None),
            getattr(e, "status_code", None),
            getattr(getattr(e, "response", None), "status_code", None),
        )
        for value in candidates:
            if isinstance(value, int) and 100 <= value <= 599:
                return value
    return None


def _is_transport_failure(exc: BaseException) -> bool:
    return any(
        isinstance(e, (httpx.TimeoutException, httpx.TransportError))
        for e in _walk_exception_chain(exc)
    )


def _hint_for(phase: str, status_code: int | None, cause: str) -> str | None:
    lowered = cause.lower()
    if status_code in {401, 403} or (status_code == 400 and "api key" in lowered):
        return "Check credentials/permissions (try setting GEMINI_API_KEY or Config.api_key)."
    if status_code == 429:
        return "Gemini quota or rate limit reached; slow down or check your plan."
    if phase == "image_fetch" and status_code in {403, 404, 410}:
        return "The image URL is not publicly reachable; inline it as BinaryContent."
    return None


def wrap_provider_error(
    exc: BaseException,
    *,
    phase: Phase,
    message: str | None = None,
    hint: str | None = None,
) -> APIError:
    """Build the APIError to raise for *exc*; cancellation is re-raised as is."""
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    if isinstance(exc, APIError):
        if exc.provider is None:
            exc.provider = PROVIDER
        if exc.phase is None:
            exc.phase = phase
        if exc.hint is None:
            exc.hint = hint
        return exc

    status_code = extract_status_code(exc)
    cause = str(exc)
    if status_code is not None:
        retryable = status_code in RETRYABLE_STATUS_CODES
    else:
        retryable = _is_transport_failure(exc)

    text = message or _PHASE_MESSAGES[phase]
    if status_code is not None:
        text = f"{text} (status={status_code})"
    if cause:
        text = f"{text}: {cause}"

    err_cls = RateLimitError if status_code == 429 else APIError
    return err_cls(
        text,
        hint=hint if hint is not None else _hint_for(phase, status_code, cause),
        retryable=retryable,
        status_code=status_code,
        provider=PROVIDER,
        phase=phase,
    )
