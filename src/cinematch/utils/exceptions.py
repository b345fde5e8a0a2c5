"""Custom exceptions for the application."""


class CineMatchError(Exception):
    """Base exception for all application errors."""

    user_message = "Something went wrong"


class ConfigurationError(CineMatchError):
    """Configuration-related errors."""

    user_message = "Configuration error"


class ValidationError(CineMatchError):
    """Missing or malformed input."""

    user_message = "Invalid request"


class NotFoundError(CineMatchError):
    """Movie or user identity could not be resolved."""

    user_message = "Movie not found"


class UserNotFoundError(NotFoundError):
    """User identity could not be resolved."""

    user_message = "User not found"


class DuplicateStateError(CineMatchError):
    """Requested transition would duplicate existing state."""

    user_message = "Movie already in watchlist"


class UpstreamError(CineMatchError):
    """External collaborator (store, LLM) failed."""

    user_message = "Failed to process request"


class LLMServiceError(UpstreamError):
    """LLM service errors."""

    pass


class StoreError(UpstreamError):
    """Document store errors."""

    pass


def describe_error(error: Exception) -> str:
    """Map an error to the single user-visible message for its kind.

    Validation errors keep their reason, everything else uses the fixed
    message of its kind so internal detail is never shown to the caller.

    Args:
        error: Raised exception.

    Returns:
        User-facing message.
    """
    if isinstance(error, ValidationError):
        reason = str(error)
        return f"{error.user_message}: {reason}" if reason else error.user_message
    if isinstance(error, CineMatchError):
        return error.user_message
    return CineMatchError.user_message
