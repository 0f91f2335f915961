"""Message and content-part translation into Gemini ``Content`` objects."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
import json
from typing import assert_never

from google.genai import types

from chatbridge.errors import ChatBridgeError, TranslationError, UnsupportedRoleError
from chatbridge.providers._errors import wrap_provider_error
from chatbridge.providers._images import ImageFetcher
from chatbridge.types import (
    BinaryContent,
    ChatMessageType,
    ContentPart,
    ImageURLContent,
    MessageContent,
    TextContent,
    ToolCall,
    ToolCallResponse,
)

ROLE_SYSTEM = "system"
ROLE_MODEL = "model"
ROLE_USER = "user"


def convert_role(role: ChatMessageType) -> str:
    """Map a message role onto a Gemini role. There is no fallback role."""
    match role:
        case ChatMessageType.SYSTEM:
            return ROLE_SYSTEM
        case ChatMessageType.AI:
            return ROLE_MODEL
        case ChatMessageType.HUMAN | ChatMessageType.GENERIC | ChatMessageType.TOOL:
            return ROLE_USER
        case ChatMessageType.FUNCTION:
            raise UnsupportedRoleError(
                role, hint="Send function results as ToolCallResponse parts in a TOOL message."
            )
        case _:
            raise UnsupportedRoleError(role)


def _tool_call_args(call: ToolCall) -> dict[str, object]:
    try:
        args = json.loads(call.arguments)
    except json.JSONDecodeError as e:
        raise TranslationError(
            f"tool call {call.name!r}: invalid arguments JSON: {e}"
        ) from e
    if not isinstance(args, dict):
        raise TranslationError(
            f"tool call {call.name!r}: arguments must decode to a JSON object, "
            f"got {type(args).__name__}"
        )
    return args


async def _fetch_image(fetcher: ImageFetcher, url: str) -> types.Part:
    try:
        mime_type, data = await fetcher.fetch(url)
    except asyncio.CancelledError:
        raise
    except ChatBridgeError:
        raise
    except Exception as e:
        raise wrap_provider_error(e, phase="image_fetch") from e
    return types.Part.from_bytes(data=data, mime_type=mime_type)


async def convert_part(part: ContentPart, *, image_fetcher: ImageFetcher) -> types.Part:
    """Translate one content part."""
    match part:
        case TextContent(text=text):
            return types.Part.from_text(text=text)
        case BinaryContent(mime_type=mime_type, data=data):
            return types.Part.from_bytes(data=data, mime_type=mime_type)
        case ImageURLContent(url=url):
            return await _fetch_image(image_fetcher, url)
        case ToolCall():
            return types.Part(
                function_call=types.FunctionCall(
                    id=part.id, name=part.name, args=_tool_call_args(part)
                )
            )
        case ToolCallResponse(name=name, content=content):
            return types.Part(
                function_response=types.FunctionResponse(
                    id=part.tool_call_id, name=name, response={"response": content}
                )
            )
        case _:
            assert_never(part)


async def convert_parts(
    parts: Sequence[ContentPart], *, image_fetcher: ImageFetcher
) -> list[types.Part]:
    """Translate parts in order; the first failure aborts."""
    return [await convert_part(p, image_fetcher=image_fetcher) for p in parts]


async def convert_content(
    message: MessageContent, *, image_fetcher: ImageFetcher
) -> types.Content:
    """Translate a whole message. The role is checked before any part is fetched."""
    role = convert_role(message.role)
    parts = await convert_parts(message.parts, image_fetcher=image_fetcher)
    return types.Content(role=role, parts=parts)


def _describe_part(part: types.Part) -> str:
    if part.function_call is not None:
        fc = part.function_call
        return f"FunctionCall Name={fc.name}, Args={fc.args}"
    if part.function_response is not None:
        fr = part.function_response
        return f"FunctionResponse Name={fr.name} Response={fr.response}"
    if part.inline_data is not None:
        blob = part.inline_data
        return f"Blob MIME={blob.mime_type!r}, size={len(blob.data or b'')}"
    if part.text is not None:
        return f"Text {part.text!r}"
    return "unknown part"


def describe_contents(contents: Sequence[types.Content]) -> str:
    """Render contents as a compact multi-line summary for debug logs."""
    lines = [f"Content (len={len(contents)})"]
    for i, content in enumerate(contents):
        lines.append(f"[{i}]: Role={content.role}")
        for j, part in enumerate(content.parts or ()):
            lines.append(f"  Parts[{j}]: {_describe_part(part)}")
    return "\n".join(lines)
