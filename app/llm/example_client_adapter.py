"""Offline chat client adapter.

Returns canned replies without network calls. Useful for local development,
for running the pipeline end to end in tests, and as a template for new
provider adapters: implement BaseChatClient and register the provider in
ChatClientFactory.
"""

import json
from typing import ClassVar

from app.llm.client_base import BaseChatClient, require_prompts
from app.llm.models import ChatCompletion, ChatStream, StreamChunk


class ExampleClientAdapter(BaseChatClient):
    """Adapter that answers every request with fixed content."""

    DEFAULT_GUIDE: ClassVar[str] = (
        "# Reading Guide\n\n"
        "## Overview\nThis document is summarised by the offline example client.\n\n"
        "## Key Points\n- Read the introduction first.\n- Focus on the conclusions.\n"
    )
    DEFAULT_CLASSIFICATION: ClassVar[dict[str, object]] = {
        "tags": ["example"],
        "desc": "Offline example classification.",
    }

    def __init__(self, guide: str | None = None, chunk_size: int = 16) -> None:
        self._guide = guide if guide is not None else self.DEFAULT_GUIDE
        self._chunk_size = max(1, chunk_size)

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
        _ = model, temperature, max_tokens
        pieces = [
            self._guide[i : i + self._chunk_size]
            for i in range(0, len(self._guide), self._chunk_size)
        ]
        chunks = [StreamChunk(content=piece) for piece in pieces]
        chunks.append(StreamChunk(finish_reason="stop"))
        return ChatStream(iter(chunks))

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
        _ = temperature, max_tokens
        content = json.dumps(self.DEFAULT_CLASSIFICATION) if json_output else self._guide
        return ChatCompletion(
            choices=[
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": content},
                    "finish_reason": "stop",
                }
            ],
            model=model,
        )
