"""
Generic retry-policy combinator.

Wraps any fallible zero-argument operation, re-running it with exponential
backoff and returning a tagged outcome instead of raising.
"""

import logging
import threading
from typing import Any, Callable, Generic, Iterator, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import ExhaustedRetries, RequestError, RetryCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy(BaseModel):
    """Attempt budget and backoff schedule."""

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=5, ge=1)
    initial_backoff: float = Field(default=1.0, ge=0.0)
    multiplier: float = Field(default=2.0, ge=1.0)

    def backoff(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        return self.initial_backoff * (self.multiplier ** (attempt - 1))

    def waits(self) -> Iterator[float]:
        """All waits between consecutive attempts, in order."""
        for attempt in range(1, self.max_attempts):
            yield self.backoff(attempt)


class Success(BaseModel, Generic[T]):
    """The operation produced a value."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    value: T
    attempts: int
    ok: bool = True


class Failure(BaseModel):
    """The operation failed terminally."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    error: Union[ExhaustedRetries, RetryCancelled]
    attempts: int
    ok: bool = False


Outcome = Union[Success, Failure]


class Sleeper:
    """Blocking wait that another thread can interrupt.

    ``sleep`` raises ``RetryCancelled`` once ``cancel`` has been called;
    ``reset`` re-arms it for the next flow.
    """

    def __init__(self):
        self._cancelled = threading.Event()

    def __call__(self, seconds: float) -> None:
        if self._cancelled.wait(timeout=seconds):
            raise RetryCancelled(f"Backoff wait of {seconds:.1f}s was cancelled")

    def cancel(self) -> None:
        self._cancelled.set()

    def reset(self) -> None:
        self._cancelled.clear()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


def retry(
    operation: Callable[[], T],
    policy: Optional[RetryPolicy] = None,
    *,
    sleep: Optional[Callable[[float], Any]] = None,
    retry_on: Tuple[Type[BaseException], ...] = (RequestError,),
    fallback_message: str = "",
    label: str = "request",
) -> Outcome:
    """Runs ``operation`` until it succeeds or the policy's attempts run out.

    Parameters
    ----------
    operation : Callable[[], T]
        Zero-argument callable; every exception in ``retry_on`` counts as a
        transient failure. Anything else propagates untouched.
    policy : RetryPolicy, optional
        Attempt budget and backoff schedule. Defaults to 5 attempts waiting
        1, 2, 4 and 8 seconds in between.
    sleep : Callable[[float], Any], optional
        Wait function; may raise ``RetryCancelled`` to abort. Defaults to a
        fresh ``Sleeper``.
    retry_on : tuple of exception types
        Exceptions treated as transient.
    fallback_message : str
        User-facing text carried by ``ExhaustedRetries``.
    label : str
        Name used in log lines.

    Returns
    -------
    Success or Failure
        ``Success.value`` holds the operation's result; ``Failure.error`` is
        ``ExhaustedRetries`` or ``RetryCancelled``.
    """
    policy = policy or RetryPolicy()
    sleep = sleep or Sleeper()
    last_error: Optional[BaseException] = None

    for attempt in range(1, policy.max_attempts + 1):
        try:
            value = operation()
        except retry_on as exc:
            last_error = exc
            logger.warning(
                "%s attempt %d/%d failed: %s: %s",
                label,
                attempt,
                policy.max_attempts,
                type(exc).__name__,
                exc,
            )
        else:
            logger.debug("%s succeeded after %d attempt(s)", label, attempt)
            return Success(value=value, attempts=attempt)

        if attempt == policy.max_attempts:
            break
        try:
            sleep(policy.backoff(attempt))
        except RetryCancelled as exc:
            logger.info("%s cancelled after %d attempt(s)", label, attempt)
            return Failure(error=exc, attempts=attempt)

    logger.error("%s gave up after %d attempts", label, policy.max_attempts)
    return Failure(
        error=ExhaustedRetries(
            attempts=policy.max_attempts,
            last_error=last_error,
            message=fallback_message,
        ),
        attempts=policy.max_attempts,
    )
