from functools import lru_cache
from pathlib import Path

from app.llm.exceptions import PromptLoadError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"

GUIDE_PROMPT_FILE = "literature_guide_system_prompt.txt"
CLASSIFICATION_PROMPT_FILE = "literature_classification_system_prompt.txt"


@lru_cache(maxsize=None)
def load_system_prompt(path: Path) -> str:
    """Load a system prompt from a file, once per path for the process lifetime.

    Raises:
        PromptLoadError: if the file cannot be read or is empty.
    """
    try:
        prompt = path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise PromptLoadError(f"Failed to load prompt {path}: {exc}") from exc
    if not prompt:
        raise PromptLoadError(f"Prompt file {path} is empty")
    return prompt


def load_guide_prompt(path: Path | None = None) -> str:
    """Load the reading-guide system prompt, defaulting to the bundled file."""
    return load_system_prompt(path or _DEFAULT_PROMPT_DIR / GUIDE_PROMPT_FILE)


def load_classification_prompt(path: Path | None = None) -> str:
    """Load the classification system prompt, defaulting to the bundled file."""
    return load_system_prompt(path or _DEFAULT_PROMPT_DIR / CLASSIFICATION_PROMPT_FILE)
