"""Base capability shared by every scan filter."""

from __future__ import annotations

from abc import ABC, abstractmethod

from asynctable.backend.filters import BackendFilter


class WriteOnceSlots:
    """Slots that can be assigned once, in __init__, and never rebound."""

    __slots__ = ()

    def __setattr__(self, name: str, value: object) -> None:
        if hasattr(self, name):
            raise AttributeError(f"{type(self).__name__} is immutable: cannot reassign {name}")
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable: cannot delete {name}")


class ScanFilter(WriteOnceSlots, ABC):
    """A backend-agnostic predicate restricting which rows/cells a read returns.

    Filters are immutable value objects. They can be shared between threads
    and attached to any number of requests.

    Subclasses implement:
        name(): stable kind name of the backend filter class they map to
        to_backend_filter(): build the backend-native filter object
    """

    __slots__ = ()

    @abstractmethod
    def name(self) -> bytes:
        """Kind name of the backend filter this translates into."""

    @abstractmethod
    def to_backend_filter(self) -> BackendFilter:
        """Build the backend-native filter object.

        Raises:
            FilterTranslationError: The backend object could not be built
                with the exact semantics this filter promises.
        """

    def __repr__(self) -> str:
        return str(self)
