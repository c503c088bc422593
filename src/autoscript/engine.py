"""
The Generation/Refinement Loop.

Composes the conversation, executor, parser and artifact store pillars into
the session's flows: design chat, generation, refinement, discussion and
manual edits. One flow runs at a time per session.
"""

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum
from typing import Dict, Iterator, List, Optional

from . import prompts
from .errors import (
    EmptyConversation,
    ExhaustedRetries,
    InvalidTransition,
    NoArtifact,
    RetryCancelled,
    SessionBusy,
)
from .models import (
    BUNDLE_DELIMITERS,
    SYSTEM_ROLE,
    USER_ROLE,
    ArtifactBundle,
    ChatMessage,
    RequestSpec,
)
from .retry import Sleeper

logger = logging.getLogger(__name__)


class State(str, Enum):
    NO_ARTIFACT = "no_artifact"
    GENERATING = "generating"
    READY = "ready"
    REFINING = "refining"


TRANSITIONS = {
    State.NO_ARTIFACT: {State.GENERATING},
    State.GENERATING: {State.READY, State.NO_ARTIFACT},
    State.READY: {State.REFINING},
    State.REFINING: {State.READY},
}


class Engine(ABC):
    """Interface for running the session's flows against the app's pillars."""

    def __init__(self, app=None):
        self.app = app

    @abstractmethod
    def chat(self, user_input: str) -> ChatMessage:
        """Runs one requirement-gathering turn and returns the assistant reply."""
        pass

    @abstractmethod
    def generate(self) -> ArtifactBundle:
        """Generates the first artifact bundle from the conversation."""
        pass

    @abstractmethod
    def refine(
        self, modification: str, bundle: Optional[ArtifactBundle] = None
    ) -> ArtifactBundle:
        """Applies a modification request to the current bundle."""
        pass

    @abstractmethod
    def discuss(self, question: str) -> ChatMessage:
        """Answers a question about the generated bundle."""
        pass

    @abstractmethod
    def edit(
        self,
        primary_file: Optional[str] = None,
        manifest: Optional[str] = None,
        docs: Optional[str] = None,
    ) -> ArtifactBundle:
        """Commits hand-edited sections of the current bundle."""
        pass

    @property
    @abstractmethod
    def state(self) -> State:
        """The artifact lifecycle state."""
        pass

    def cancel(self) -> None:
        """Interrupts the flow in flight, if the engine supports it."""
        pass


class Synchronous(Engine):
    """Runs each flow on the calling thread, guarded by a per-session lock.

    A second call made while a flow is in flight is rejected with
    ``SessionBusy`` rather than queued.
    """

    def __init__(self, app=None):
        super().__init__(app)
        self._lock = threading.Lock()
        self._in_flight: Optional[State] = None

    # --- Lifecycle ---

    @property
    def state(self) -> State:
        if self._in_flight is not None:
            return self._in_flight
        if self.app.store.get() is None:
            return State.NO_ARTIFACT
        return State.READY

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def cancel(self) -> None:
        """Interrupts a pending backoff wait of the flow in flight."""
        sleeper = self.app.executor.sleep
        if isinstance(sleeper, Sleeper):
            sleeper.cancel()

    @contextmanager
    def _exclusive(self, flow: str) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            logger.warning("Rejected %s: another flow is in flight", flow)
            raise SessionBusy(f"Cannot start {flow} while another request is running")
        try:
            sleeper = self.app.executor.sleep
            if isinstance(sleeper, Sleeper):
                sleeper.reset()
            yield
        finally:
            self._lock.release()

    @contextmanager
    def _transition(self, target: State) -> Iterator[None]:
        current = self.state
        if target not in TRANSITIONS[current]:
            raise InvalidTransition(current, target)
        logger.info("Artifact lifecycle: %s -> %s", current.value, target.value)
        self._in_flight = target
        try:
            yield
        finally:
            self._in_flight = None
            logger.info("Artifact lifecycle: %s -> %s", target.value, self.state.value)

    # --- Requests ---

    def _request(self, flow: prompts.Flow, messages: List[Dict[str, str]]) -> RequestSpec:
        context = self.app.context
        return RequestSpec(
            model_id=context.model_id,
            credential=context.credential,
            messages=messages,
            max_output_tokens=flow.max_output_tokens,
            temperature=flow.temperature,
        )

    @staticmethod
    def _single_turn(flow: prompts.Flow, content: str) -> List[Dict[str, str]]:
        return [
            {"role": SYSTEM_ROLE, "content": flow.system_prompt},
            {"role": USER_ROLE, "content": content},
        ]

    def _bundle_parser(self, snapshot: str):
        def parse(text: str) -> ArtifactBundle:
            primary_file, manifest, docs = self.app.parser.parse(text, BUNDLE_DELIMITERS)
            return ArtifactBundle(
                primary_file=primary_file,
                manifest=manifest,
                docs=docs,
                source_conversation_snapshot=snapshot,
            )

        return parse

    # --- Flows ---

    def chat(self, user_input: str) -> ChatMessage:
        if not user_input or not user_input.strip():
            raise ValueError("user_input must not be blank")

        conversation = self.app.conversation
        with self._exclusive("chat"):
            conversation.append_user(user_input.strip())
            request = self._request(
                prompts.DESIGN, conversation.build_payload(prompts.DESIGN.system_prompt)
            )
            outcome = self.app.executor.execute(
                request, fallback_message=prompts.DESIGN.fallback_message
            )
            if outcome.ok:
                return conversation.append_assistant(outcome.value)
            if isinstance(outcome.error, RetryCancelled):
                raise outcome.error
            return conversation.append_assistant(prompts.DESIGN.fallback_message)

    def generate(self) -> ArtifactBundle:
        conversation = self.app.conversation
        with self._exclusive("generation"):
            if not conversation.has_user_turn():
                raise EmptyConversation(
                    "Describe the task you want to automate before generating"
                )
            with self._transition(State.GENERATING):
                transcript = conversation.transcript()
                request = self._request(
                    prompts.GENERATE,
                    self._single_turn(
                        prompts.GENERATE, prompts.generation_request(transcript)
                    ),
                )
                outcome = self.app.executor.execute_parsed(
                    request,
                    self._bundle_parser(transcript),
                    fallback_message=prompts.GENERATE.fallback_message,
                )
                if not outcome.ok:
                    if isinstance(outcome.error, ExhaustedRetries):
                        conversation.append_assistant(prompts.GENERATE.fallback_message)
                    raise outcome.error

                self.app.store.replace(outcome.value)
                self.app.context.conversation_context = transcript
                return outcome.value

    def refine(
        self, modification: str, bundle: Optional[ArtifactBundle] = None
    ) -> ArtifactBundle:
        if not modification or not modification.strip():
            raise ValueError("modification must not be blank")

        with self._exclusive("refinement"):
            stored = self.app.store.get()
            if stored is None:
                raise NoArtifact()
            current = bundle or stored
            # provenance always comes from the committed bundle
            with self._transition(State.REFINING):
                request = self._request(
                    prompts.REFINE,
                    self._single_turn(
                        prompts.REFINE,
                        prompts.refinement_request(
                            current.primary_file,
                            current.manifest,
                            current.docs,
                            modification.strip(),
                        ),
                    ),
                )
                fallback = prompts.REFINE.fallback_message.format(
                    attempts=self.app.executor.policy.max_attempts
                )
                outcome = self.app.executor.execute_parsed(
                    request,
                    self._bundle_parser(stored.source_conversation_snapshot),
                    fallback_message=fallback,
                )
                if not outcome.ok:
                    raise outcome.error

                self.app.store.replace(outcome.value)
                return outcome.value

    def discuss(self, question: str) -> ChatMessage:
        if not question or not question.strip():
            raise ValueError("question must not be blank")

        discussion = self.app.discussion
        with self._exclusive("discussion"):
            bundle = self.app.store.get()
            if bundle is None:
                raise NoArtifact()
            context = (
                self.app.context.conversation_context
                or bundle.source_conversation_snapshot
            )
            payload = discussion.build_payload(
                prompts.DISCUSS.system_prompt,
                new_turn=prompts.discussion_request(context, question.strip()),
            )
            discussion.append_user(question.strip())
            outcome = self.app.executor.execute(
                self._request(prompts.DISCUSS, payload),
                fallback_message=prompts.DISCUSS.fallback_message,
            )
            if outcome.ok:
                return discussion.append_assistant(outcome.value or prompts.EMPTY_REPLY)
            if isinstance(outcome.error, RetryCancelled):
                raise outcome.error
            return discussion.append_assistant(prompts.DISCUSS.fallback_message)

    def edit(
        self,
        primary_file: Optional[str] = None,
        manifest: Optional[str] = None,
        docs: Optional[str] = None,
    ) -> ArtifactBundle:
        """Commits hand-edited sections, keeping the others as they are."""
        with self._exclusive("edit"):
            current = self.app.store.get()
            if current is None:
                raise NoArtifact()
            edited = ArtifactBundle(
                primary_file=current.primary_file if primary_file is None else primary_file,
                manifest=current.manifest if manifest is None else manifest,
                docs=current.docs if docs is None else docs,
                source_conversation_snapshot=current.source_conversation_snapshot,
            )
            self.app.store.replace(edited)
            return edited
