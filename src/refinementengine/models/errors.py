"""Error codes and exception taxonomy for RefinementEngine."""

from enum import Enum


class ErrorCode(str, Enum):
    """Error category codes for generation operations."""

    # Retryable errors (retried by the invoker)
    RATE_LIMITED = "RATE_LIMITED"
    RECOVERABLE_FAILURE = "RECOVERABLE_FAILURE"

    # Terminal errors
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    GENERATION_FAILED = "GENERATION_FAILED"
    INVALID_INPUT = "INVALID_INPUT"
    SESSION_BUSY = "SESSION_BUSY"


# Set of retryable error codes
RETRYABLE_ERRORS = frozenset({
    ErrorCode.RATE_LIMITED,
    ErrorCode.RECOVERABLE_FAILURE,
})

RATE_LIMIT_MESSAGE = "Error 429: rate limit exceeded. Please try again later."
NO_VALID_RESULT_MESSAGE = "No valid result was returned."


def is_retryable(code: ErrorCode) -> bool:
    """Check if an error code indicates a retryable error."""
    return code in RETRYABLE_ERRORS


class StudioError(Exception):
    """Base class for every terminal error surfaced to the caller."""

    code: ErrorCode = ErrorCode.GENERATION_FAILED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RateLimitExhausted(StudioError):
    """All attempts were consumed while the API kept answering 429."""

    code = ErrorCode.RATE_LIMITED

    def __init__(self, message: str = RATE_LIMIT_MESSAGE):
        super().__init__(message)


class RecoverableFailureExhausted(StudioError):
    """All attempts were consumed on a transient, non rate-limit failure."""

    code = ErrorCode.RECOVERABLE_FAILURE


class MalformedResponseError(StudioError):
    """Success status, but the body lacks the expected fields or carries an error."""

    code = ErrorCode.MALFORMED_RESPONSE

    def __init__(self, message: str = NO_VALID_RESULT_MESSAGE):
        super().__init__(message)


class GenerationError(StudioError):
    """The image endpoint succeeded without returning prediction bytes."""

    code = ErrorCode.GENERATION_FAILED


class UserInputError(StudioError):
    """Input rejected before any network call was made."""

    code = ErrorCode.INVALID_INPUT


class SessionBusyError(StudioError):
    """A turn was submitted while another one is still in flight."""

    code = ErrorCode.SESSION_BUSY

    def __init__(self, message: str = "A request is already in progress for this session."):
        super().__init__(message)
