"""Concrete implementations for artifact stores."""

import threading
from abc import ABC, abstractmethod
from typing import Optional

from .models import ArtifactBundle


class Store(ABC):
    """Interface for holding the session's current artifact bundle."""

    @abstractmethod
    def get(self) -> Optional[ArtifactBundle]:
        """Returns the current bundle, or None before the first generation."""
        pass

    @abstractmethod
    def replace(self, bundle: ArtifactBundle) -> None:
        """Overwrites the current bundle as a single unit."""
        pass


class InMemory(Store):
    """Holds one frozen bundle; readers see either the old or the new one."""

    def __init__(self, bundle: Optional[ArtifactBundle] = None):
        self._lock = threading.Lock()
        self._bundle = bundle

    def get(self) -> Optional[ArtifactBundle]:
        with self._lock:
            return self._bundle

    def replace(self, bundle: ArtifactBundle) -> None:
        if not isinstance(bundle, ArtifactBundle):
            raise TypeError(f"Expected ArtifactBundle, got {type(bundle).__name__}")
        with self._lock:
            self._bundle = bundle
