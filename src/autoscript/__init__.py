"""
The main entrypoint for the Autoscript package.

This module contains the primary Autoscript class, which wires the pillars
(LLM provider, conversation, executor, parser, artifact store and engine)
into one session-scoped pipeline that turns a design conversation into a
script, its requirements.txt and its README.md.
"""

from typing import Optional

from . import conversation, engine, llm, parser, store
from .config import Settings, configure_logging, get_settings
from .executor import Executor
from .models import ArtifactBundle, ChatMessage, SessionContext
from .prompts import GREETING

__all__ = ["Autoscript", "configure_logging"]


class Autoscript:
    """
    One user session of the script-generation pipeline.

    The constructor uses concrete default implementations, making it easy to
    get started while keeping every pillar replaceable.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        llm: Optional[llm.LLM] = None,
        store: Optional[store.Store] = None,
        conversation: Optional[conversation.History] = None,
        discussion: Optional[conversation.History] = None,
        parser: Optional[parser.Parser] = None,
        executor: Optional[Executor] = None,
        engine: Optional[engine.Engine] = None,
        settings: Optional[Settings] = None,
        greeting: bool = True,
    ) -> None:
        """
        Initialize a session with configurable pillars.

        Parameters
        ----------
        model : str, optional
            Model identifier. Defaults to ``settings.model``.
        api_key : str, optional
            Bearer credential for the completion service. Defaults to
            ``settings.api_key``.
        llm : llm.LLM, optional
            Provider used to reach the completion service.
            Defaults to llm.OpenRouter() configured from settings.
        store : store.Store, optional
            Holder of the current artifact bundle. Defaults to store.InMemory().
        conversation : conversation.History, optional
            Design conversation. Defaults to conversation.InMemory() seeded with
            the assistant greeting.
        discussion : conversation.History, optional
            Post-generation discussion. Defaults to conversation.InMemory().
        parser : parser.Parser, optional
            Section parser. Defaults to parser.Sentinel().
        executor : Executor, optional
            Resilient request executor. Defaults to an Executor over ``llm``
            using the settings' retry policy.
        engine : engine.Engine, optional
            Flow runner. Defaults to engine.Synchronous().
        settings : Settings, optional
            Defaults to get_settings().
        greeting : bool, default=True
            Whether a fresh design conversation starts with the greeting.

        Raises
        ------
        pydantic.ValidationError
            If no model or credential can be resolved.

        Examples
        --------
        >>> session = Autoscript(api_key="sk-or-...")
        >>> session.chat("Rename every photo in a folder by its EXIF date")
        >>> bundle = session.generate()
        >>> session.refine("Also write a CSV log of the renames")
        """
        self.settings = settings or get_settings()

        credential = api_key
        if credential is None and self.settings.api_key is not None:
            credential = self.settings.api_key.get_secret_value()
        self.context = SessionContext(
            model_id=model or self.settings.model, credential=credential
        )

        llm_module = globals()["llm"]
        store_module = globals()["store"]
        conversation_module = globals()["conversation"]
        parser_module = globals()["parser"]
        engine_module = globals()["engine"]

        self.llm = llm or llm_module.OpenRouter(
            default_model=self.context.model_id,
            base_url=self.settings.base_url,
            timeout=self.settings.request_timeout,
        )
        self.store = store if store is not None else store_module.InMemory()
        if conversation is None:
            conversation = conversation_module.InMemory()
            if greeting:
                conversation.append_assistant(GREETING)
        self.conversation = conversation
        self.discussion = (
            discussion if discussion is not None else conversation_module.InMemory()
        )
        self.parser = parser if parser is not None else parser_module.Sentinel()
        self.executor = executor or Executor(
            self.llm, policy=self.settings.retry_policy()
        )

        self.engine = engine if engine is not None else engine_module.Synchronous()
        self.engine.app = self

    @property
    def bundle(self) -> Optional[ArtifactBundle]:
        return self.store.get()

    @property
    def state(self) -> "engine.State":
        return self.engine.state

    def chat(self, user_input: str) -> ChatMessage:
        return self.engine.chat(user_input)

    def generate(self) -> ArtifactBundle:
        return self.engine.generate()

    def refine(
        self, modification: str, bundle: Optional[ArtifactBundle] = None
    ) -> ArtifactBundle:
        return self.engine.refine(modification, bundle)

    def discuss(self, question: str) -> ChatMessage:
        return self.engine.discuss(question)

    def edit(self, **sections: str) -> ArtifactBundle:
        return self.engine.edit(**sections)

    def cancel(self) -> None:
        self.engine.cancel()
