"""Session error taxonomy."""

from __future__ import annotations

UNKNOWN_ERROR_MESSAGE = "Unknown error occurred."
NO_IMAGE_MESSAGE = "No image was generated."


class SessionError(RuntimeError):
    """Base class for errors raised by the session layer."""


class ValidationError(SessionError):
    """Blank prompt, or a submission while a turn is already in flight.

    Never reaches the transcript; ``SessionController.submit`` rejects silently.
    """


class ProviderError(SessionError):
    """The generative provider failed (network, quota, malformed response)."""


class EmptyResultError(SessionError):
    def __init__(self, message: str = NO_IMAGE_MESSAGE) -> None:
        super().__init__(message)


class ReconcilerStateError(SessionError):
    """Illegal use of the stream reconciler (append while closed, double open)."""


def describe_failure(exc: BaseException | None) -> str:
    if exc is None:
        return UNKNOWN_ERROR_MESSAGE
    message = str(exc).strip()
    return message or UNKNOWN_ERROR_MESSAGE
