import logging

from roadmapper.core.errors import InvalidPromptError

logger = logging.getLogger(__name__)

MIN_PROMPT_LENGTH = 3
MAX_PROMPT_LENGTH = 200

# Markers of non-educational queries (questions, live data, troubleshooting).
BLOCKED_KEYWORDS = (
    "weather",
    "score",
    "news",
    "today",
    "current",
    "calculate",
    "what is",
    "who is",
    "where is",
    "when is",
    "why is",
    "how to fix",
    "debug",
    "error",
    "problem",
)


def validate_prompt(prompt: str) -> None:
    """Raise InvalidPromptError unless ``prompt`` is a usable learning topic."""
    normalized = (prompt or "").strip().lower()

    if len(normalized) < MIN_PROMPT_LENGTH:
        raise InvalidPromptError(InvalidPromptError.TOO_SHORT)

    if len(normalized) > MAX_PROMPT_LENGTH:
        raise InvalidPromptError(InvalidPromptError.TOO_LONG)

    matched = next((k for k in BLOCKED_KEYWORDS if k in normalized), None)
    if matched:
        logger.info(f"[PROMPT] Rejected topic containing blocked keyword '{matched}'")
        raise InvalidPromptError(InvalidPromptError.BLOCKED_KEYWORD)
