from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IContainer(ABC):
    """Interface for container-like objects.

    Collaborators that only need to look services up should depend on this
    interface rather than on ``Container`` itself.
    """

    @abstractmethod
    def get(self, abstract: Any) -> Any:
        """Resolve an entry by identifier.

        Raises ``BindwireEntryNotFoundError`` when nothing is known about the
        identifier, and ``BindwireBindingResolutionError`` when a known entry
        fails to resolve.
        """

    @abstractmethod
    def has(self, abstract: Any) -> bool:
        """Return whether the container has an entry for the identifier."""
