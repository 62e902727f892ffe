"""Error taxonomy and classification for workout generation.

Every failure that reaches the orchestrator is reduced to a ClassifiedError:
a code from a closed enumeration plus retry and fallback metadata.

Codes (retryable / fallback available):
- INVALID_DATA: malformed input (no / no)
- INSUFFICIENT_DATA: required input missing (no / yes)
- API_ERROR: provider rejected the request (yes / yes)
- NETWORK_ERROR: connection dropped or aborted (yes / yes)
- TIMEOUT_ERROR: attempt exceeded its deadline (yes / yes)
- RATE_LIMITED: provider throttled the request (yes / yes)
- SERVICE_UNAVAILABLE: provider not ready (yes / yes)
- GENERATION_FAILED: anything else (yes / yes)

Errors raised by this package carry their code from the throw site. Textual
heuristics are only used for exceptions coming from third-party code.
"""

import re
from dataclasses import dataclass
from enum import StrEnum


class ErrorCode(StrEnum):
    INVALID_DATA = "INVALID_DATA"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    API_ERROR = "API_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    GENERATION_FAILED = "GENERATION_FAILED"


@dataclass(frozen=True)
class ClassifiedError:
    """Typed description of a generation failure.

    Attributes:
        code: Error code from the closed taxonomy
        message: Human-readable message for the user
        retryable: Whether retrying the same request may succeed
        retry_after: Suggested wait before retrying, in seconds
        recovery_suggestion: What the user can do about it
        fallback_available: Whether the internal generator can stand in
        details: Text of the underlying failure, if any
    """

    code: ErrorCode
    message: str
    retryable: bool
    retry_after: float | None
    recovery_suggestion: str
    fallback_available: bool
    details: str | None = None


@dataclass(frozen=True)
class _ErrorSpec:
    message: str
    retryable: bool
    retry_after: float | None
    recovery_suggestion: str
    fallback_available: bool


_ERROR_TABLE: dict[ErrorCode, _ErrorSpec] = {
    ErrorCode.INVALID_DATA: _ErrorSpec(
        message="The workout request contains invalid data.",
        retryable=False,
        retry_after=None,
        recovery_suggestion="Review your profile and workout selections, then try again.",
        fallback_available=False,
    ),
    ErrorCode.INSUFFICIENT_DATA: _ErrorSpec(
        message="Not enough information to generate a workout.",
        retryable=False,
        retry_after=None,
        recovery_suggestion="Complete your profile and choose a workout focus before generating.",
        fallback_available=True,
    ),
    ErrorCode.API_ERROR: _ErrorSpec(
        message="The workout generation service returned an error.",
        retryable=True,
        retry_after=15.0,
        recovery_suggestion="Try again in a few moments.",
        fallback_available=True,
    ),
    ErrorCode.NETWORK_ERROR: _ErrorSpec(
        message="A network problem interrupted workout generation.",
        retryable=True,
        retry_after=5.0,
        recovery_suggestion="Check your internet connection and try again.",
        fallback_available=True,
    ),
    ErrorCode.TIMEOUT_ERROR: _ErrorSpec(
        message="Workout generation took too long to complete.",
        retryable=True,
        retry_after=10.0,
        recovery_suggestion="Try again, or choose a shorter workout.",
        fallback_available=True,
    ),
    ErrorCode.RATE_LIMITED: _ErrorSpec(
        message="Too many workout requests in a short time.",
        retryable=True,
        retry_after=60.0,
        recovery_suggestion="Wait a minute before generating another workout.",
        fallback_available=True,
    ),
    ErrorCode.SERVICE_UNAVAILABLE: _ErrorSpec(
        message="The workout generation service is temporarily unavailable.",
        retryable=True,
        retry_after=30.0,
        recovery_suggestion="Try again shortly. A basic workout can be generated in the meantime.",
        fallback_available=True,
    ),
    ErrorCode.GENERATION_FAILED: _ErrorSpec(
        message="Workout generation failed.",
        retryable=True,
        retry_after=5.0,
        recovery_suggestion="Try generating the workout again.",
        fallback_available=True,
    ),
}

_STATUS_CODE_PATTERN = re.compile(r"\b(429|500|502|503)\b")


class GenerationError(Exception):
    """Base exception for workout generation failures.

    Subclasses fix the error code at the throw site so the classifier
    never has to guess.
    """

    code: ErrorCode = ErrorCode.GENERATION_FAILED

    def __init__(self, message: str, *, code: ErrorCode | None = None) -> None:
        if code is not None:
            self.code = code
        super().__init__(message)

    @property
    def classified(self) -> ClassifiedError:
        return classify_error(self, self.code)

    @classmethod
    def from_exception(cls, error: BaseException) -> "GenerationError":
        """Wrap a third-party exception, inferring its code from its signature."""
        if isinstance(error, GenerationError):
            return error
        code = infer_error_code(error)
        wrapped = error_class_for(code)(_describe(error) or type(error).__name__)
        wrapped.__cause__ = error
        return wrapped


class InvalidDataError(GenerationError):
    """Raised when request data is present but malformed."""

    code = ErrorCode.INVALID_DATA


class InsufficientDataError(GenerationError):
    """Raised when required request data is missing."""

    code = ErrorCode.INSUFFICIENT_DATA


class ApiError(GenerationError):
    code = ErrorCode.API_ERROR


class NetworkError(GenerationError):
    code = ErrorCode.NETWORK_ERROR


class GenerationTimeoutError(GenerationError):
    code = ErrorCode.TIMEOUT_ERROR


class RateLimitedError(GenerationError):
    code = ErrorCode.RATE_LIMITED


class ServiceUnavailableError(GenerationError):
    code = ErrorCode.SERVICE_UNAVAILABLE


class GenerationCancelledError(Exception):
    """Raised at a suspension point once the attempt's token is cancelled.

    Deliberately not a GenerationError: cancellation is never classified,
    retried or answered with a fallback.
    """

    def __init__(self, message: str = "Generation was cancelled") -> None:
        super().__init__(message)


_ERROR_CLASSES: dict[ErrorCode, type[GenerationError]] = {
    ErrorCode.INVALID_DATA: InvalidDataError,
    ErrorCode.INSUFFICIENT_DATA: InsufficientDataError,
    ErrorCode.API_ERROR: ApiError,
    ErrorCode.NETWORK_ERROR: NetworkError,
    ErrorCode.TIMEOUT_ERROR: GenerationTimeoutError,
    ErrorCode.RATE_LIMITED: RateLimitedError,
    ErrorCode.SERVICE_UNAVAILABLE: ServiceUnavailableError,
    ErrorCode.GENERATION_FAILED: GenerationError,
}


def error_class_for(code: ErrorCode) -> type[GenerationError]:
    return _ERROR_CLASSES[code]


def _describe(error: BaseException | None) -> str | None:
    if error is None:
        return None
    try:
        text = str(error)
    except Exception:
        return type(error).__name__
    return text or None


def infer_error_code(error: BaseException | None) -> ErrorCode:
    """Infer an error code from an exception.

    Typed errors short-circuit. Everything else is matched on type and
    message text, mirroring how provider SDKs report transient failures.

    Args:
        error: Exception to inspect (None yields GENERATION_FAILED)

    Returns:
        Inferred error code
    """
    if error is None:
        return ErrorCode.GENERATION_FAILED
    if isinstance(error, GenerationError):
        return error.code
    if isinstance(error, TimeoutError):
        return ErrorCode.TIMEOUT_ERROR
    if isinstance(error, ConnectionError):
        return ErrorCode.NETWORK_ERROR

    error_type = type(error).__name__
    error_str = (_describe(error) or "").lower()
    status_match = _STATUS_CODE_PATTERN.search(error_str)
    status_code = status_match.group(1) if status_match else None

    if error_type in {"AbortError", "APIConnectionError"} or "abort" in error_str:
        return ErrorCode.NETWORK_ERROR
    if error_type in {"APITimeoutError", "ReadTimeout", "ConnectTimeout"} or "timed out" in error_str or "timeout" in error_str:
        return ErrorCode.TIMEOUT_ERROR
    if error_type == "RateLimitError" or "rate limit" in error_str or "quota" in error_str or status_code == "429":
        return ErrorCode.RATE_LIMITED
    if "service unavailable" in error_str or status_code in {"502", "503"}:
        return ErrorCode.SERVICE_UNAVAILABLE
    if any(keyword in error_str for keyword in ("network", "connection", "fetch")):
        return ErrorCode.NETWORK_ERROR
    if error_type in {"APIError", "APIStatusError", "ModelHTTPError"} or status_code == "500":
        return ErrorCode.API_ERROR
    return ErrorCode.GENERATION_FAILED


def classify_error(error: BaseException | None, code: ErrorCode | str | None = None) -> ClassifiedError:
    """Build a ClassifiedError for a failure.

    Pure table lookup keyed by code. Never raises: an unknown code hint
    degrades to GENERATION_FAILED.

    Args:
        error: The raised failure (may be None)
        code: Requested error code; inferred from the error when omitted

    Returns:
        ClassifiedError for the failure
    """
    try:
        resolved = ErrorCode(code) if code is not None else infer_error_code(error)
    except ValueError:
        resolved = ErrorCode.GENERATION_FAILED

    spec = _ERROR_TABLE[resolved]
    return ClassifiedError(
        code=resolved,
        message=spec.message,
        retryable=spec.retryable,
        retry_after=spec.retry_after,
        recovery_suggestion=spec.recovery_suggestion,
        fallback_available=spec.fallback_available,
        details=_describe(error),
    )
