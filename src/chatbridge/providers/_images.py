"""Image download for image-URL content parts."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Protocol, runtime_checkable
from urllib.parse import unquote_to_bytes

import httpx

from chatbridge._http import DEFAULT_IMAGE_FETCH_TIMEOUT_S
from chatbridge.errors import TranslationError

logger = logging.getLogger(__name__)

_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)


@runtime_checkable
class ImageFetcher(Protocol):
    """Resolve an image URL into ``(mime_type, data)``."""

    async def fetch(self, url: str) -> tuple[str, bytes]: ...  # noqa: D102


def sniff_image_mime_type(data: bytes) -> str | None:
    """Detect common image formats from their magic bytes."""
    for signature, mime_type in _SIGNATURES:
        if data.startswith(signature):
            return mime_type
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def _resolve_mime_type(declared: str | None, data: bytes, url: str) -> str:
    mime_type = (declared or "").split(";", 1)[0].strip().lower()
    if not mime_type.startswith("image/"):
        mime_type = sniff_image_mime_type(data) or mime_type
    if not mime_type.startswith("image/"):
        raise TranslationError(
            f"invalid mime type {mime_type or 'unknown'!r} for image {url[:80]!r}",
            hint="Image URLs must resolve to image/* content.",
        )
    return mime_type


def decode_data_url(url: str) -> tuple[str, bytes]:
    """Decode an RFC 2397 ``data:`` URL without touching the network."""
    header, sep, payload = url.partition(",")
    if not sep:
        raise TranslationError("malformed data URL: missing ','")
    meta = header.removeprefix("data:").split(";")
    declared = meta[0] or None
    try:
        if "base64" in meta[1:]:
            data = base64.b64decode(payload, validate=True)
        else:
            data = unquote_to_bytes(payload)
    except (binascii.Error, ValueError) as e:
        raise TranslationError(f"malformed data URL: {e}") from e
    return _resolve_mime_type(declared, data, url), data


class HttpImageFetcher:
    """Download images with httpx.

    A client can be injected for connection reuse or testing; otherwise a
    short-lived client is created per fetch.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout_s: float = DEFAULT_IMAGE_FETCH_TIMEOUT_S,
    ) -> None:
        self._client = client
        self._timeout_s = timeout_s

    async def fetch(self, url: str) -> tuple[str, bytes]:
        """Return the mime type and bytes behind *url*."""
        if url.startswith("data:"):
            return decode_data_url(url)

        if self._client is not None:
            response = await self._client.get(url, follow_redirects=True)
        else:
            async with httpx.AsyncClient(timeout=self._timeout_s) as client:
                response = await client.get(url, follow_redirects=True)
        response.raise_for_status()

        data = response.content
        logger.debug("Fetched image %s (%d bytes)", url[:80], len(data))
        return _resolve_mime_type(response.headers.get("content-type"), data, url), data
