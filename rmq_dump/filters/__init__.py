"""Filter module for deciding which consumed messages get exported.

Filters are predicates over the raw message body. They are kept small and
single-purpose and chained together, with the first rejecting filter
deciding the outcome.

Key components:
- MessageFilter: Abstract base class for all message filters
- FilterChain: Ordered, short-circuiting chain of filters
- MessageFilterEngine: Compiles FilterSettings into a chain, collecting errors
- FilterFactory: Factory for creating filter components
"""

from rmq_dump.filters.base import (
    FilterChain,
    FilterLike,
    MessageFilter,
)
from rmq_dump.filters.engine import MessageFilterEngine
from rmq_dump.filters.factory import FilterFactory
from rmq_dump.filters.patterns import (
    ExcludePatternFilter,
    IncludePatternFilter,
    RegexFilter,
    SizeFilter,
)
from rmq_dump.filters.query import JqQueryFilter

__all__ = [
    "MessageFilter",
    "FilterLike",
    "FilterChain",
    "FilterFactory",
    "MessageFilterEngine",
    "SizeFilter",
    "RegexFilter",
    "IncludePatternFilter",
    "ExcludePatternFilter",
    "JqQueryFilter",
]
