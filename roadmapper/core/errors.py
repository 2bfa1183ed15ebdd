"""
Roadmapper: Domain Errors
=========================
Every failure the service surfaces to a caller is one of these classes.
Callers branch on the class (or ``kind``), never on the message text.
The message is safe to show to an end user.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    INVALID_PROMPT = "invalid_prompt"
    AUTH_CONFIG = "auth_config"
    SERVICE_UNAUTHORIZED = "service_unauthorized"
    SERVICE_RATE_LIMITED = "service_rate_limited"
    SERVICE_BAD_REQUEST = "service_bad_request"
    PARSE_ERROR = "parse_error"
    FORMAT_ERROR = "format_error"
    GENERATION_FAILED = "generation_failed"
    SIGN_IN = "sign_in"
    USER_EXISTS = "user_exists"


class RoadmapError(Exception):
    """Base class: carries a kind, a user-facing message and an HTTP status."""

    kind: ErrorKind = ErrorKind.GENERATION_FAILED
    status_code: int = 502
    default_message: str = "Failed to generate roadmap"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class InvalidPromptError(RoadmapError):
    kind = ErrorKind.INVALID_PROMPT
    status_code = 400

    TOO_SHORT = "too short"
    TOO_LONG = "too long"
    BLOCKED_KEYWORD = "blocked keyword"

    _MESSAGES = {
        TOO_SHORT: "Please enter a longer topic description.",
        TOO_LONG: "Please enter a shorter topic description.",
        BLOCKED_KEYWORD: (
            "Please enter a topic you want to learn about, "
            "rather than a question or problem."
        ),
    }

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(self._MESSAGES[reason])


class AuthConfigError(RoadmapError):
    """A required credential or setting is missing."""

    kind = ErrorKind.AUTH_CONFIG
    status_code = 500
    default_message = "Server configuration is incomplete"


class ServiceUnauthorized(RoadmapError):
    kind = ErrorKind.SERVICE_UNAUTHORIZED
    default_message = "Authentication failed"


class ServiceRateLimited(RoadmapError):
    kind = ErrorKind.SERVICE_RATE_LIMITED
    status_code = 429
    default_message = "Too many requests. Please try again later."


class ServiceBadRequest(RoadmapError):
    kind = ErrorKind.SERVICE_BAD_REQUEST
    default_message = (
        "The AI service couldn't process this request. "
        "Please try again with different parameters."
    )


class ParseError(RoadmapError):
    kind = ErrorKind.PARSE_ERROR
    default_message = "Failed to parse JSON response"


class FormatError(RoadmapError):
    kind = ErrorKind.FORMAT_ERROR
    default_message = "Invalid response format: missing nodes array"


class GenerationFailed(RoadmapError):
    kind = ErrorKind.GENERATION_FAILED


class SignInError(RoadmapError):
    kind = ErrorKind.SIGN_IN
    status_code = 401
    default_message = "Invalid email or password"


class UserExistsError(RoadmapError):
    kind = ErrorKind.USER_EXISTS
    status_code = 409
    default_message = "An account with this email already exists"
