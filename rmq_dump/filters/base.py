from abc import ABC, abstractmethod
from typing import Iterable, Optional, Protocol, Tuple
import logging

logger = logging.getLogger(__name__)


class FilterLike(Protocol):
    """Protocol for objects with filter method compatibility.

    This protocol defines the interface for anything that behaves like a filter,
    which makes it compatible with both actual MessageFilter implementations
    and test mocks that implement the same interface.
    """

    def accepts(self, body: bytes) -> bool:
        """Decide whether a message body passes this filter."""
        ...


class MessageFilter(ABC):
    """Abstract base class for all message filters.

    A filter is a predicate over the raw message body. Filters hold only
    state compiled at construction and never mutate it, so one instance can
    be evaluated from several threads.
    """

    @abstractmethod
    def accepts(self, body: bytes) -> bool:
        """Decide whether a message body passes this filter.

        Args:
            body: The raw message body.

        Returns:
            True if the message passes, False if it is rejected.
        """
        pass

    @staticmethod
    def decode(body: bytes) -> str:
        return body.decode("utf-8", errors="replace")


class FilterChain:
    """A chain of filters evaluated in order against a message body.

    The first filter that rejects the body decides the outcome and the
    remaining filters are not evaluated. An empty chain accepts everything.
    """

    def __init__(self, filters: Optional[Iterable[FilterLike]] = None):
        """Initialize a new filter chain.

        Args:
            filters: The filters to evaluate, in order. If None, the chain is
                    empty.
        """
        self.filters: Tuple[FilterLike, ...] = tuple(filters or ())

    def add_filter(self, message_filter: FilterLike) -> "FilterChain":
        """Return a new chain with a filter appended to the end.

        Args:
            message_filter: The filter to add to the chain.
        """
        return FilterChain(self.filters + (message_filter,))

    def accepts(self, body: bytes) -> bool:
        """Evaluate the chain against a message body.

        Args:
            body: The raw message body.

        Returns:
            True if every filter accepts the body.
        """
        for message_filter in self.filters:
            if not message_filter.accepts(body):
                logger.debug(f"Message rejected by {type(message_filter).__name__}")
                return False
        return True

    def __len__(self) -> int:
        return len(self.filters)
