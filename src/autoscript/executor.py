"""Resilient request executor."""

import logging
from typing import Any, Callable, Optional, TypeVar

from .errors import Malformed
from .llm import LLM
from .models import RequestSpec
from .retry import Outcome, RetryPolicy, Sleeper, retry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Executor:
    """Sends requests through an LLM pillar under a retry policy.

    Every failure of a single attempt (transport error, non-success status,
    undecodable body) is transient and retried identically. Results are
    returned as tagged outcomes; request failures never raise past here.
    """

    def __init__(
        self,
        llm: LLM,
        policy: Optional[RetryPolicy] = None,
        sleep: Optional[Callable[[float], Any]] = None,
    ):
        self.llm = llm
        self.policy = policy or RetryPolicy()
        self.sleep = sleep or Sleeper()

    def send(self, request: RequestSpec) -> str:
        """Performs exactly one attempt and returns the raw text as received."""
        logger.debug(
            "Sending %d message(s) to %s", len(request.messages), request.model_id
        )
        try:
            response = self.llm.generate_response(
                request.messages,
                model=request.model_id,
                credential=request.credential.get_secret_value(),
                max_tokens=request.max_output_tokens,
                temperature=request.temperature,
            )
        except Exception as exc:
            raise self.llm.translate_error(exc) from exc

        try:
            content = self.llm.extract_content(response)
        except Exception as exc:
            raise Malformed(f"Unexpected response shape: {exc!r}") from exc
        if not isinstance(content, str):
            raise Malformed(f"Expected text content, got {type(content).__name__}")
        return content

    def execute(self, request: RequestSpec, fallback_message: str = "") -> Outcome:
        """Sends ``request`` until it succeeds or attempts run out."""
        return self.execute_parsed(request, lambda text: text, fallback_message)

    def execute_parsed(
        self,
        request: RequestSpec,
        parse: Callable[[str], T],
        fallback_message: str = "",
    ) -> Outcome:
        """Like ``execute`` but a ``ParseError`` from ``parse`` also re-sends the request."""
        return retry(
            lambda: parse(self.send(request)),
            self.policy,
            sleep=self.sleep,
            fallback_message=fallback_message,
            label=f"completion[{request.model_id}]",
        )
