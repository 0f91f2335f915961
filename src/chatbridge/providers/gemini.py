"""Gemini provider implementation."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
import logging
from typing import Any

from google import genai
from google.genai import types

from chatbridge.callbacks import CallbackHandler, resolve
from chatbridge.config import Config
from chatbridge.errors import (
    ConfigurationError,
    DeadlineExceededError,
    NoContentError,
)
from chatbridge.options import CallOptions, merge_options
from chatbridge.providers._errors import Phase, wrap_provider_error
from chatbridge.providers._gemini_content import (
    convert_content,
    convert_parts,
    describe_contents,
)
from chatbridge.providers._gemini_schema import convert_tools
from chatbridge.providers._gemini_stream import (
    ResponseStream,
    convert_candidates,
    drain_stream,
)
from chatbridge.providers._images import HttpImageFetcher, ImageFetcher
from chatbridge.providers.base import check_messages, generate_from_single_prompt
from chatbridge.types import ChatMessageType, ContentResponse, MessageContent

logger = logging.getLogger(__name__)

RESPONSE_MIME_TYPE_JSON = "application/json"

HARM_CATEGORIES: tuple[types.HarmCategory, ...] = (
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
)


def resolve_response_mime_type(opts: CallOptions, *, has_tools: bool) -> str | None:
    """Pick the response mime type from JSON mode or an explicit value."""
    explicit = opts.response_mime_type or None
    if explicit and opts.json_mode:
        raise ConfigurationError(
            "conflicting options, can't use json_mode and response_mime_type together",
            hint="Set json_mode=True or response_mime_type='application/json', not both.",
        )
    if explicit:
        return explicit
    if opts.json_mode and not has_tools:
        return RESPONSE_MIME_TYPE_JSON
    return None


class GeminiProvider:
    """Google Gemini chat provider.

    Holds read-only configuration only, so one instance can serve concurrent
    calls. The SDK client is created lazily on first use.
    """

    def __init__(
        self,
        config: Config,
        *,
        callbacks: CallbackHandler | None = None,
        image_fetcher: ImageFetcher | None = None,
    ) -> None:
        """Create provider from a Config."""
        self.config = config
        self.callbacks = callbacks
        self.image_fetcher: ImageFetcher = image_fetcher or HttpImageFetcher()
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazy-initialize the Gemini client."""
        if self._client is None:
            self._client = genai.Client(api_key=self.config.api_key)
        return self._client

    async def aclose(self) -> None:
        """Release the SDK client's connections."""
        client, self._client = self._client, None
        closer = getattr(getattr(client, "aio", None), "aclose", None)
        if callable(closer):
            try:
                await closer()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.warning("Gemini client cleanup failed: %s", exc)

    def default_options(self) -> CallOptions:
        """The base layer that per-call options are merged over."""
        c = self.config
        return CallOptions(
            model=c.default_model,
            candidate_count=c.default_candidate_count,
            max_tokens=c.default_max_tokens,
            temperature=c.default_temperature,
            top_p=c.default_top_p,
            top_k=c.default_top_k,
        )

    def build_config(self, opts: CallOptions) -> types.GenerateContentConfig:
        """Assemble the vendor generation config; fails before any network call."""
        tools = convert_tools(opts.tools)
        mime_type = resolve_response_mime_type(opts, has_tools=bool(tools))
        threshold = types.HarmBlockThreshold(self.config.harm_threshold)
        return types.GenerateContentConfig(
            candidate_count=opts.candidate_count,
            max_output_tokens=opts.max_tokens,
            temperature=opts.temperature,
            top_p=opts.top_p,
            top_k=opts.top_k,
            stop_sequences=list(opts.stop_words) if opts.stop_words else None,
            safety_settings=[
                types.SafetySetting(category=category, threshold=threshold)
                for category in HARM_CATEGORIES
            ],
            response_mime_type=mime_type,
            tools=list(tools) or None,
        )

    async def call(self, prompt: str, *options: CallOptions) -> str:
        """Generate from a single prompt and return the first choice's text."""
        return await generate_from_single_prompt(self, prompt, *options)

    async def generate_content(
        self,
        messages: Sequence[MessageContent],
        *options: CallOptions,
    ) -> ContentResponse:
        """Generate a response for *messages*.

        A single message must come from the human and is sent as a one-shot
        generation. With several messages the last one is the request and the
        earlier ones are chat history, except System messages, which become
        the system instruction.
        """
        messages = list(messages)
        check_messages(messages)

        if self.callbacks is not None:
            await resolve(self.callbacks.handle_generate_content_start(messages))

        opts = merge_options(self.default_options(), *options)
        config = self.build_config(opts)

        deadline = asyncio.timeout(opts.timeout_s)
        try:
            async with deadline:
                if len(messages) == 1:
                    response = await self._generate_from_single_message(
                        messages[0], config, opts
                    )
                else:
                    response = await self._generate_from_messages(
                        messages, config, opts
                    )
        except TimeoutError as e:
            if not deadline.expired():
                raise
            raise DeadlineExceededError(
                f"Gemini call exceeded timeout_s={opts.timeout_s}",
                retryable=True,
                provider="gemini",
                phase="generate",
            ) from e

        if self.callbacks is not None:
            await resolve(self.callbacks.handle_generate_content_end(response))
        return response

    async def _generate_from_single_message(
        self,
        message: MessageContent,
        config: types.GenerateContentConfig,
        opts: CallOptions,
    ) -> ContentResponse:
        parts = await convert_parts(message.parts, image_fetcher=self.image_fetcher)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Single-shot generation\n%s",
                describe_contents([types.Content(role="user", parts=parts)]),
            )

        models = self._get_client().aio.models
        if opts.streaming_func is None:
            response = await self._vendor_call(
                "generate",
                models.generate_content,
                model=opts.model,
                contents=parts,
                config=config,
            )
            return self._convert_response(response)

        source = await self._vendor_call(
            "stream",
            models.generate_content_stream,
            model=opts.model,
            contents=parts,
            config=config,
        )
        return await drain_stream(ResponseStream(source), opts.streaming_func)

    async def _generate_from_messages(
        self,
        messages: Sequence[MessageContent],
        config: types.GenerateContentConfig,
        opts: CallOptions,
    ) -> ContentResponse:
        *earlier, last = messages
        history: list[types.Content] = []
        system_instruction: types.Content | None = None
        for message in earlier:
            content = await convert_content(message, image_fetcher=self.image_fetcher)
            if message.role == ChatMessageType.SYSTEM:
                system_instruction = content
                continue
            history.append(content)
        request = await convert_content(last, image_fetcher=self.image_fetcher)

        if system_instruction is not None:
            config = config.model_copy(update={"system_instruction": system_instruction})
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Chat generation with %d history turn(s), system instruction=%s\n%s",
                len(history),
                system_instruction is not None,
                describe_contents([*history, request]),
            )

        chat = self._get_client().aio.chats.create(
            model=opts.model, config=config, history=history
        )
        if opts.streaming_func is None:
            response = await self._vendor_call(
                "generate", chat.send_message, request.parts
            )
            return self._convert_response(response)

        source = await self._vendor_call(
            "stream", chat.send_message_stream, request.parts
        )
        return await drain_stream(ResponseStream(source), opts.streaming_func)

    @staticmethod
    async def _vendor_call(
        phase: Phase,
        fn: Callable[..., Awaitable[Any]],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        try:
            return await fn(*args, **kwargs)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(e, phase=phase) from e

    @staticmethod
    def _convert_response(response: types.GenerateContentResponse) -> ContentResponse:
        if not response.candidates:
            hint = None
            feedback = response.prompt_feedback
            if feedback is not None and feedback.block_reason is not None:
                reason = getattr(feedback.block_reason, "value", feedback.block_reason)
                hint = f"Prompt was blocked: {reason}"
            raise NoContentError(hint=hint)
        return convert_candidates(response.candidates, response.usage_metadata)
