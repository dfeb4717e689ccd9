import json
from collections.abc import Iterable, Iterator
from contextlib import ExitStack
from typing import Any

import httpx
import openai

from app.llm.client_base import BaseChatClient, require_prompts
from app.llm.exceptions import EmptyResponseError, ModelError, ServiceError, TransportError
from app.llm.models import ChatCompletion, ChatStream, StreamChunk
from app.logging.logger import Log

_DONE_SENTINEL = "[DONE]"
_PROVIDER_ERRORS = (openai.OpenAIError, httpx.HTTPError)


class OpenAIClientAdapter(BaseChatClient):
    """Chat client built on the OpenAI-compatible chat completions API.

    The SDK's own retries are disabled: every stage makes exactly one attempt.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    def stream_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str,
        user_prompt: str,
    ) -> ChatStream:
        require_prompts(system_prompt, user_prompt)
        stack = ExitStack()
        try:
            response = stack.enter_context(
                self._client.chat.completions.with_streaming_response.create(
                    model=model,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    stream=True,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                )
            )
        except _PROVIDER_ERRORS as exc:
            stack.close()
            raise _translate_error(exc) from exc
        return ChatStream(self._iter_chunks(response.iter_lines()), on_close=stack.close)

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str,
        user_prompt: str,
        json_output: bool = False,
    ) -> ChatCompletion:
        require_prompts(system_prompt, user_prompt)
        extra: dict[str, Any] = {}
        if json_output:
            extra["response_format"] = {"type": "json_object"}
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                **extra,
            )
        except _PROVIDER_ERRORS as exc:
            raise _translate_error(exc) from exc

        if not response.choices:
            raise EmptyResponseError("AI returned no choices")
        completion = ChatCompletion(
            choices=[choice.model_dump() for choice in response.choices],
            model=response.model or model,
        )
        content = completion.first_message_content
        if content is None or not content.strip():
            raise EmptyResponseError("AI returned empty response")
        return completion

    def _iter_chunks(self, lines: Iterable[str]) -> Iterator[StreamChunk]:
        """Decode server-sent event lines into stream chunks.

        Ends at the [DONE] sentinel. A stream that closes without [DONE] is
        accepted only when a finish reason was already received.
        """
        finished = False
        try:
            for line in lines:
                payload = _sse_data(line)
                if payload is None:
                    continue
                if payload == _DONE_SENTINEL:
                    return
                chunk = _decode_chunk(payload)
                if chunk is None:
                    continue
                if chunk.finish_reason is not None:
                    finished = True
                yield chunk
        except _PROVIDER_ERRORS as exc:
            raise _translate_error(exc) from exc

        if not finished:
            raise TransportError("AI stream ended before a terminal signal")


def _sse_data(line: str) -> str | None:
    """Return the data field of one SSE line, None for anything else."""
    line = line.strip()
    if not line.startswith("data:"):
        return None
    return line[len("data:"):].strip()


def _decode_chunk(payload: str) -> StreamChunk | None:
    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        Log.warning(f"Skipping malformed stream chunk: {payload[:200]!r}")
        return None
    if not isinstance(data, dict):
        Log.warning(f"Skipping non-object stream chunk: {payload[:200]!r}")
        return None
    if data.get("error"):
        raise ServiceError(f"AI provider stream error: {data['error']}", body=data["error"])

    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        Log.debug("Skipping stream chunk without choices")
        return None
    choice = choices[0]
    delta = choice.get("delta") or {}
    content = delta.get("content") if isinstance(delta, dict) else None
    return StreamChunk(content=content, finish_reason=choice.get("finish_reason"))


def _translate_error(exc: Exception) -> ModelError:
    if isinstance(exc, (openai.APIConnectionError, httpx.TransportError)):
        return TransportError(f"AI provider network error: {exc}")
    if isinstance(exc, openai.APIStatusError):
        return ServiceError(
            f"AI provider API error: {exc}",
            status_code=exc.status_code,
            body=exc.body,
        )
    if isinstance(exc, openai.APIError):
        return ServiceError(f"AI provider API error: {exc}", body=exc.body)
    if isinstance(exc, openai.OpenAIError):
        return ServiceError(f"AI provider error: {exc}")
    return TransportError(f"AI provider network error: {exc}")
