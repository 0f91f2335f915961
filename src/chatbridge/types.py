"""Provider-agnostic request and response types.

Messages are built by the caller and treated as immutable. Each message holds
an ordered sequence of content parts; a part is exactly one of the classes in
the ``ContentPart`` union.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from chatbridge.schema import StructuredSchema


class ChatMessageType(str, Enum):
    """Who authored a message."""

    SYSTEM = "system"
    AI = "ai"
    HUMAN = "human"
    GENERIC = "generic"
    TOOL = "tool"
    FUNCTION = "function"


@dataclass(frozen=True)
class TextContent:
    """Plain text."""

    text: str


@dataclass(frozen=True)
class BinaryContent:
    """Opaque bytes with a declared mime type."""

    mime_type: str
    data: bytes


@dataclass(frozen=True)
class ImageURLContent:
    """An image referenced by URL; fetched at translation time."""

    url: str


@dataclass(frozen=True)
class ToolCall:
    """A function call, either requested by the model or replayed in history.

    ``arguments`` is a JSON-encoded object.
    """

    name: str
    arguments: str
    id: str | None = None


@dataclass(frozen=True)
class ToolCallResponse:
    """The textual result of running a tool."""

    name: str
    content: str
    tool_call_id: str | None = None


ContentPart = TextContent | BinaryContent | ImageURLContent | ToolCall | ToolCallResponse


@dataclass(frozen=True)
class MessageContent:
    """A single conversational turn."""

    role: ChatMessageType
    parts: tuple[ContentPart, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "parts", tuple(self.parts))


@dataclass(frozen=True)
class FunctionDefinition:
    """A callable function the model may invoke.

    ``parameters`` is either a ``StructuredSchema`` or a plain JSON-schema-like
    mapping; anything else is rejected at translation time.
    """

    name: str
    description: str = ""
    parameters: StructuredSchema | Mapping[str, Any] | None = None


@dataclass(frozen=True)
class Tool:
    """A tool declaration. Only ``type="function"`` is usable."""

    type: str
    function: FunctionDefinition | None = None


@dataclass
class ContentChoice:
    """One candidate of a generation response."""

    content: str = ""
    stop_reason: str = ""
    generation_info: dict[str, Any] = field(default_factory=dict)
    tool_calls: list[ToolCall] = field(default_factory=list)


@dataclass
class ContentResponse:
    """Normalized generation response, one choice per candidate."""

    choices: list[ContentChoice] = field(default_factory=list)


def text_parts(*texts: str) -> tuple[TextContent, ...]:
    """Wrap strings as text parts."""
    return tuple(TextContent(t) for t in texts)


def human_message(text: str) -> MessageContent:
    """Build a single-text Human message."""
    return MessageContent(role=ChatMessageType.HUMAN, parts=text_parts(text))
