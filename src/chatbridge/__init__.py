"""chatbridge: one chat/completion interface over a pluggable generative-AI backend.

Public API:
    - create_provider(): Build a provider from a Config
    - Provider.generate_content(): Messages in, normalized ContentResponse out
    - Provider.call(): Single prompt in, text out
    - CallOptions: Per-call options, overlaid in order
    - Config: Provider defaults and credentials
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chatbridge.callbacks import CallbackHandler, LoggingCallbackHandler
from chatbridge.config import Config
from chatbridge.errors import (
    APIError,
    ChatBridgeError,
    ConfigurationError,
    DeadlineExceededError,
    NoContentError,
    RateLimitError,
    StreamShapeError,
    TranslationError,
    UnsupportedRoleError,
)
from chatbridge.options import CallOptions, merge_options
from chatbridge.schema import StructuredSchema
from chatbridge.types import (
    BinaryContent,
    ChatMessageType,
    ContentChoice,
    ContentPart,
    ContentResponse,
    FunctionDefinition,
    ImageURLContent,
    MessageContent,
    TextContent,
    Tool,
    ToolCall,
    ToolCallResponse,
    human_message,
    text_parts,
)

if TYPE_CHECKING:
    from chatbridge.providers._images import ImageFetcher
    from chatbridge.providers.base import Provider

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("chatbridge")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("chatbridge").addHandler(logging.NullHandler())


def create_provider(
    config: Config,
    *,
    callbacks: CallbackHandler | None = None,
    image_fetcher: ImageFetcher | None = None,
) -> Provider:
    """Get the provider for *config*.

    In mock mode *callbacks* still fire; *image_fetcher* is unused because the
    mock only reads text parts.

    Example:
        provider = create_provider(Config())
        text = await provider.call("Say hi")
    """
    if config.use_mock:
        from chatbridge.providers.mock import MockProvider

        return MockProvider(callbacks=callbacks)

    from chatbridge.providers.gemini import GeminiProvider

    return GeminiProvider(config, callbacks=callbacks, image_fetcher=image_fetcher)


__all__ = [
    "APIError",
    "BinaryContent",
    "CallOptions",
    "CallbackHandler",
    "ChatBridgeError",
    "ChatMessageType",
    "Config",
    "ConfigurationError",
    "ContentChoice",
    "ContentPart",
    "ContentResponse",
    "DeadlineExceededError",
    "FunctionDefinition",
    "ImageURLContent",
    "LoggingCallbackHandler",
    "MessageContent",
    "NoContentError",
    "RateLimitError",
    "StreamShapeError",
    "StructuredSchema",
    "TextContent",
    "Tool",
    "ToolCall",
    "ToolCallResponse",
    "TranslationError",
    "UnsupportedRoleError",
    "create_provider",
    "human_message",
    "merge_options",
    "text_parts",
]
