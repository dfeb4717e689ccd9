from abc import ABC, abstractmethod

from app.llm.models import ChatCompletion, ChatStream


class BaseChatClient(ABC):
    """Contract for provider-specific chat completion clients."""

    @abstractmethod
    def stream_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str,
        user_prompt: str,
    ) -> ChatStream:
        """Start a streamed completion and return its chunks lazily.

        Raises:
            ModelError: when the request is rejected or the transport fails,
                either on the initial call or while iterating.
        """

    @abstractmethod
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
        """Run a blocking completion.

        Raises:
            ModelError: on transport or service failure, or when the reply
                carries no usable content.
        """


def require_prompts(system_prompt: str, user_prompt: str) -> None:
    """Reject requests with an empty system or user prompt."""
    if not system_prompt.strip():
        raise ValueError("system_prompt must not be empty")
    if not user_prompt.strip():
        raise ValueError("user_prompt must not be empty")
