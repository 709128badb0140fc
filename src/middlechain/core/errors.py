"""
Module defining middlechain-specific errors and the failure normalization rules.

Every failure leaving a pipeline goes through `normalize_error`, which uses two
collaborators: a predicate recognizing "domain" errors (`is_error` by default) and
a constructor wrapping anything else (`wrap_error` by default).
"""

from collections.abc import Callable

__all__ = [
    "DEFAULT_STATUS",
    "PipelineError",
    "ValidationError",
    "is_error",
    "normalize_error",
    "wrap_error",
]


DEFAULT_STATUS = 500


class PipelineError(Exception):
    """
    Generic reportable error raised for failures that are not recognized errors.

    Attributes:
        message: Human readable description of the failure.
        status: HTTP-style status code describing the failure. (Default: 500)

    """

    def __init__(self, message: str, status: int = DEFAULT_STATUS) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, status={self.status})"


class ValidationError(Exception):
    """
    Exception raised when a pipeline is built from an invalid list of stages.

    This happens when no stages are given, or when one of the stages is not callable.
    """


def is_error(value: object) -> bool:
    """Return True if `value` is an `Exception` instance."""
    return isinstance(value, Exception)


def wrap_error(error: BaseException, status: int = DEFAULT_STATUS) -> PipelineError:
    """
    Wrap a failure that is not a recognized error into a `PipelineError`.

    The original failure is kept as the `__cause__` of the returned error.

    Args:
        error: The failure to wrap.
        status: Status code of the returned error. (Default: 500)

    Returns:
        A new `PipelineError`, whose message references the original failure.

    """
    wrapped = PipelineError(f"Error while handling middlewares: {error}", status)
    wrapped.__cause__ = error
    return wrapped


def normalize_error(
    value: object,
    is_error: Callable[[object], bool] = is_error,
    wrap_error: Callable[[BaseException], BaseException] = wrap_error,
) -> BaseException:
    """
    Convert an arbitrary failure value into a raisable, recognized error.

    Recognized errors are returned unchanged. Other exceptions are wrapped with
    `wrap_error`. Values which are not exceptions at all (for example a plain `42`
    passed to a continuation) are first turned into a `PipelineError` from their
    string representation, and then wrapped.

    Args:
        value: The failure value, either raised by a stage or passed explicitly to
            a continuation.
        is_error: Predicate recognizing domain errors.
        wrap_error: Constructor wrapping failures that are not domain errors.

    Returns:
        An exception that can be raised to the caller of the pipeline.

    """
    if isinstance(value, BaseException) and is_error(value):
        return value

    if not isinstance(value, BaseException):
        value = PipelineError(str(value))

    return wrap_error(value)
