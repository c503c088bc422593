"""Exception taxonomy shared by every pillar."""

from typing import Optional


class AutoscriptError(Exception):
    """Base class for all errors raised by the package."""


class RequestError(AutoscriptError):
    """A single request attempt failed; the retry policy treats it as transient."""


class NetworkError(RequestError):
    """The request never got a response (connection refused, timeout, ...)."""


class ServiceError(RequestError):
    """The completion service answered with a non-success status."""

    def __init__(self, status_code: Optional[int], message: str = ""):
        self.status_code = status_code
        super().__init__(
            message or f"API call failed with status {status_code}"
        )


class ParseError(RequestError):
    """The response could not be turned into the expected shape."""


class MissingDelimiter(ParseError):
    """A sentinel delimiter was not found where it was expected."""

    def __init__(self, delimiter: str):
        self.delimiter = delimiter
        super().__init__(f"Invalid response format: missing separator {delimiter!r}")


class Malformed(ParseError):
    """The response body did not carry choices[0].message.content as text."""


class ExhaustedRetries(AutoscriptError):
    """Terminal failure after the retry policy ran out of attempts."""

    def __init__(
        self,
        attempts: int,
        last_error: Optional[BaseException] = None,
        message: str = "",
    ):
        self.attempts = attempts
        self.last_error = last_error
        self.message = message or f"Request failed after {attempts} attempts."
        super().__init__(self.message)


class RetryCancelled(AutoscriptError):
    """A backoff wait was cancelled before the next attempt."""


class SessionBusy(AutoscriptError):
    """Another generation, refinement or chat turn is already in flight."""


class NoArtifact(AutoscriptError):
    """No artifact bundle exists yet; the caller should generate one first."""

    redirect = "generate"

    def __init__(self, message: str = "No generated script yet. Generate one first."):
        super().__init__(message)


class InvalidTransition(AutoscriptError):
    """The requested flow is not allowed from the current lifecycle state."""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move from {current.value!r} to {target.value!r}")


class EmptyConversation(AutoscriptError):
    """Generation was requested before the user described anything."""
