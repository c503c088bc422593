"""Concrete implementations for LLM providers."""

import os
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .errors import NetworkError, RequestError, ServiceError
from .models import BUNDLE_DELIMITERS

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class LLM(ABC):
    """Abstract Base Class for all LLM providers."""

    @abstractmethod
    def generate_response(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
        credential: Optional[str] = None,
        **kwargs: Any,
    ) -> Any:
        """Sends one chat-completion request to the provider.

        Must not retry on its own: the executor owns the retry policy.

        Parameters
        ----------
        messages : List[Dict[str, Any]]
            Ordered ``{"role", "content"}`` dictionaries.
        model : str, optional
            Model identifier; the provider's default when omitted.
        credential : str, optional
            Bearer credential for this call; the provider's configured key
            when omitted.
        **kwargs : Any
            Sampling parameters (``max_tokens``, ``temperature``) passed
            directly to the SDK.

        Returns
        -------
        Any
            The provider's native response object.
        """
        pass

    @abstractmethod
    def extract_content(self, response: Any) -> str:
        """Extracts the text content from the provider's native response object.

        Any exception raised here is classified as a malformed response.
        """
        pass

    def translate_error(self, error: Exception) -> RequestError:
        """Maps an exception raised by ``generate_response`` onto the taxonomy."""
        if isinstance(error, RequestError):
            return error
        return NetworkError(f"{type(error).__name__}: {error}")


class OpenAI(LLM):
    """Any OpenAI-compatible chat-completions endpoint."""

    def __init__(
        self,
        default_model: str = "gpt-4o",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        default_headers: Optional[Dict[str, str]] = None,
    ):
        import openai  # noqa: F401

        self.model = default_model
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self.base_url = base_url
        self.timeout = timeout
        self.default_headers = default_headers

    def _client(self, credential: Optional[str]):
        from openai import OpenAI as OpenAIClient

        # max_retries=0: one SDK call is exactly one attempt
        return OpenAIClient(
            api_key=credential or self.api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=0,
            default_headers=self.default_headers,
        )

    def generate_response(self, messages, model=None, credential=None, **kwargs):
        return self._client(credential).chat.completions.create(
            messages=messages, model=model or self.model, **kwargs
        )

    def extract_content(self, response: Any) -> str:
        return response.choices[0].message.content

    def translate_error(self, error: Exception) -> RequestError:
        import openai

        if isinstance(error, openai.APIStatusError):
            return ServiceError(error.status_code, str(error))
        if isinstance(error, openai.APIConnectionError):
            return NetworkError(str(error))
        return super().translate_error(error)


class OpenRouter(OpenAI):
    def __init__(
        self,
        default_model: str = "x-ai/grok-4-fast:free",
        api_key: Optional[str] = None,
        base_url: str = OPENROUTER_BASE_URL,
        timeout: float = 120.0,
    ):
        super().__init__(
            default_model=default_model,
            api_key=api_key or os.environ.get("OPENROUTER_API_KEY"),
            base_url=base_url,
            timeout=timeout,
            default_headers={"X-Title": "Autoscript"},
        )


class Echo(LLM):
    """Offline provider returning a well-formed three-section response."""

    def __init__(self, default_model: str = "echo-v1", delay: float = 0.0):
        self.model = default_model
        self.delay = delay

    def generate_response(self, messages, model=None, credential=None, **kwargs):
        if self.delay:
            time.sleep(self.delay)
        user_prompt = messages[-1]["content"] if messages else "No message provided"
        requirements, readme = BUNDLE_DELIMITERS
        content = (
            f'print("Echo LLM - static response for testing")\n'
            f"{requirements}\n"
            f"# no third-party dependencies\n"
            f"{readme}\n"
            f"# Echo script\n\n_Your prompt:_\n\n{user_prompt}"
        )
        return {"choices": [{"message": {"content": content}}]}

    def extract_content(self, response: Any) -> str:
        return response["choices"][0]["message"]["content"]
