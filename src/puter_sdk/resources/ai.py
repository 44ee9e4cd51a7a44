"""AI inference: chat, OCR, image generation and speech."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..config import (
    CHAT_DRIVER,
    CHAT_SERVICE,
    IMAGE_UPLOAD_DIR,
    INTERFACE_CHAT_COMPLETION,
    INTERFACE_IMAGE_GENERATION,
    INTERFACE_OCR,
    INTERFACE_TTS,
)
from ..exceptions import BackendError, ValidationError
from ..models import ChatCompletion, ChatMessage, ChatOptions
from ..streaming import ByteStream
from ._base import Resource
from .fs import PuterFileSystem

logger = logging.getLogger(__name__)

MessageInput = str | Sequence[ChatMessage | Mapping[str, Any]]


def _merge_options(
    options: ChatOptions | Mapping[str, Any] | None,
    overrides: dict[str, Any],
) -> dict[str, Any]:
    """Merge keyword overrides over the options bag and validate the result."""
    if isinstance(options, ChatOptions):
        merged = options.model_dump(exclude_none=True)
    else:
        merged = dict(options or {})
    merged.update(overrides)

    try:
        ChatOptions.model_validate(merged)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise ValidationError(f"Invalid chat option: {first['msg']}", field=field) from e
    return merged


def _to_messages(prompt: Any) -> list[dict[str, Any]]:
    """Turn a prompt string or a message sequence into a list of message dicts."""
    if isinstance(prompt, str):
        return [{"role": "user", "content": prompt}]
    if not isinstance(prompt, (list, tuple)):
        raise ValidationError(
            "first argument must be a string or an array of messages", field="prompt"
        )

    messages = []
    for message in prompt:
        if isinstance(message, ChatMessage):
            message = message.model_dump(exclude_none=True)
        elif not isinstance(message, Mapping):
            raise ValidationError("Invalid message format", field="prompt")
        messages.append(dict(message))
    return messages


def _check_messages(messages: list[dict[str, Any]]) -> None:
    for message in messages:
        if not isinstance(message.get("role"), str) or not isinstance(
            message.get("content"), (str, list, tuple)
        ):
            raise ValidationError("Invalid message format", field="prompt")
    if not messages:
        raise ValidationError("At least one message is required.", field="prompt")


def _attach_images(messages: list[dict[str, Any]], parts: list[dict[str, Any]]) -> None:
    """Append image parts to the last user message, or to a new one."""
    for message in reversed(messages):
        if message.get("role") == "user":
            content = message.get("content")
            if isinstance(content, str):
                content = [{"type": "text", "text": content}]
            message["content"] = [*(content or []), *parts]
            return
    messages.append({"role": "user", "content": parts})


def _group_by_provider(models: list[Any]) -> dict[str, list[Any]]:
    grouped: dict[str, list[Any]] = {}
    for model in models:
        provider = model.get("provider") if isinstance(model, dict) else None
        grouped.setdefault(provider or "unknown", []).append(model)
    return grouped


class PuterAI(Resource):
    """AI drivers of the platform."""

    def __init__(self, transport, fs: PuterFileSystem) -> None:
        super().__init__(transport)
        self._fs = fs

    async def chat(
        self,
        prompt: MessageInput,
        test_mode: bool = False,
        images: str | Sequence[str] | None = None,
        options: ChatOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> ChatCompletion | ByteStream:
        """Get a chat completion.

        Args:
            prompt: A user prompt, or a sequence of messages.
            test_mode: Ask the backend for a canned answer. Ignored when streaming.
            images: Local image paths to upload and attach to the last user message.
            options: Completion options (``stream``, ``temperature``,
                ``max_tokens``, ``model`` and any extra backend option).
            **kwargs: Options overriding those in ``options``.

        Returns:
            The completion, or the live response body when ``stream`` is set.

        Raises:
            ValidationError: If the prompt, the messages or the options are invalid.
            BackendError: If the backend rejected the request.

        Example:
            ```python
            reply = await client.ai.chat("Tell me a joke", model="gpt-4o-mini")
            print(reply.message["content"])

            stream = await client.ai.chat(messages, stream=True)
            async for chunk in stream:
                ...
            ```
        """
        messages = _to_messages(prompt)
        merged = _merge_options(options, kwargs)
        stream = bool(merged.pop("stream", False))

        if images:
            paths = [images] if isinstance(images, str) else list(images)
            parts = [await self._upload_image(path) for path in paths]
            _attach_images(messages, parts)

        _check_messages(messages)

        args: dict[str, Any] = {"messages": messages}
        if stream:
            args["stream"] = True
        args.update((key, value) for key, value in merged.items() if value is not None)

        if stream:
            return await self._transport.call_stream(
                INTERFACE_CHAT_COMPLETION,
                "complete",
                args,
                driver=CHAT_DRIVER,
                test_mode=False,
            )

        envelope = await self._transport.call(
            INTERFACE_CHAT_COMPLETION,
            "complete",
            args,
            driver=CHAT_DRIVER,
            test_mode=test_mode,
            expect_success=True,
            failure_message="Failed to get chat completion",
        )
        return self._safe_validate(ChatCompletion, envelope.get("result") or {})

    async def _upload_image(self, path: str) -> dict[str, Any]:
        data = await self._fs.upload(path, IMAGE_UPLOAD_DIR)
        results = data.get("results") if isinstance(data, dict) else None
        first = results[0] if results and isinstance(results[0], dict) else data
        uid = first.get("uid") if isinstance(first, dict) else None
        if not uid:
            raise BackendError(f"Upload of {path} returned no file uid", "INVALID_RESPONSE", data)

        logger.debug(f"Attached image {path} as {uid}")
        return {"type": "image_url", "url": f"file://{uid}"}

    async def img2txt(self, file_id: str) -> Any:
        """Recognize the text in an uploaded image."""
        self._require(file_id, "File ID is required", "file_id")
        envelope = await self._transport.call(
            INTERFACE_OCR,
            "recognize",
            {"source": file_id},
            expect_success=True,
            failure_message="OCR processing failed",
        )
        return envelope.get("result")

    async def txt2img(self, prompt: str) -> Any:
        """Generate an image from a text prompt."""
        self._require(prompt, "Prompt is required", "prompt")
        envelope = await self._transport.call(
            INTERFACE_IMAGE_GENERATION,
            "generate",
            {"prompt": prompt},
            expect_success=True,
            failure_message="Image generation failed",
        )
        return envelope.get("result")

    async def list_voices(self) -> Any:
        """List the voices available for speech synthesis."""
        envelope = await self._transport.call(
            INTERFACE_TTS,
            "list_voices",
            expect_success=True,
            failure_message="Failed to list voices",
        )
        return envelope.get("result")

    async def txt2speech(self, text: str, voice: str) -> ByteStream:
        """Synthesize speech; returns the live audio stream."""
        if not text or not voice:
            raise ValidationError("Text and voice are required")
        return await self._transport.call_stream(
            INTERFACE_TTS,
            "synthesize",
            {"text": text, "voice": voice},
        )

    async def _models(self) -> list[Any]:
        envelope = await self._transport.call(
            INTERFACE_CHAT_COMPLETION,
            "models",
            {},
            service=CHAT_SERVICE,
            failure_message="Failed to list models",
        )
        result = envelope.get("result")
        if isinstance(result, dict):
            result = result.get("models")
        return list(result or [])

    async def list_models(self, provider: str | None = None) -> dict[str, list[Any]] | list[Any]:
        """List the chat models.

        Args:
            provider: Only return the models of this provider.

        Returns:
            Models grouped by provider, or the models of ``provider``.
        """
        grouped = _group_by_provider(await self._models())
        if provider is not None:
            return grouped.get(provider, [])
        return grouped

    async def list_model_providers(self) -> list[str]:
        """List the providers of the chat models, in first-seen order."""
        return list(_group_by_provider(await self._models()))
