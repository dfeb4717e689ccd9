from pathlib import Path

from app.llm.client_base import BaseChatClient
from app.llm.exceptions import EmptyResponseError
from app.llm.models import ChatStream
from app.llm.prompt_loader import load_classification_prompt, load_guide_prompt
from app.logging.logger import Log

GUIDE_USER_PROMPT = "Generate a reading guide for the following literature:\n\n{content}"
CLASSIFICATION_USER_PROMPT = (
    "Generate tags and a description for the following reading guide:\n\n{reading_guide}"
)

CLASSIFICATION_TEMPERATURE = 0.3
CLASSIFICATION_MAX_TOKENS = 500


class LiteratureAiService:
    """Issues the reading-guide and classification requests for one document.

    System prompts are read lazily on first use and cached for the process
    lifetime by the prompt loader.
    """

    def __init__(
        self,
        *,
        client: BaseChatClient,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 4000,
        guide_prompt_path: Path | None = None,
        classification_prompt_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._guide_prompt_path = guide_prompt_path
        self._classification_prompt_path = classification_prompt_path

    def stream_reading_guide(self, content: str) -> ChatStream:
        """Start streaming a reading guide for the document content."""
        return self._client.stream_chat_completion(
            model=self._model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            system_prompt=load_guide_prompt(self._guide_prompt_path),
            user_prompt=GUIDE_USER_PROMPT.format(content=content),
        )

    def generate_reading_guide(self, content: str) -> str:
        """Generate a whole reading guide in one blocking call.

        Raises:
            ModelError: on transport or service failure, or when the
                provider returns no content.
        """
        completion = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            system_prompt=load_guide_prompt(self._guide_prompt_path),
            user_prompt=GUIDE_USER_PROMPT.format(content=content),
        )
        guide = completion.first_message_content or ""
        Log.info(
            f"Reading guide generated: {len(guide)} chars, "
            f"finish reason {completion.first_finish_reason}"
        )
        return guide

    def generate_classification(self, reading_guide: str) -> str:
        """Ask for tags and a description of a reading guide, returning the raw reply.

        Raises:
            ModelError: on transport or service failure, or an empty reply.
        """
        completion = self._client.create_chat_completion(
            model=self._model,
            temperature=CLASSIFICATION_TEMPERATURE,
            max_tokens=CLASSIFICATION_MAX_TOKENS,
            system_prompt=load_classification_prompt(self._classification_prompt_path),
            user_prompt=CLASSIFICATION_USER_PROMPT.format(reading_guide=reading_guide),
            json_output=True,
        )
        reply = completion.first_message_content or ""
        if not reply.strip():
            raise EmptyResponseError("AI returned an empty classification")
        return reply
