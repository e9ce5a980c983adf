from typing import List

from rmq_dump.config.loader import FilterSettings
from rmq_dump.filters.base import FilterChain, FilterLike
from rmq_dump.filters.engine import MessageFilterEngine


class FilterFactory:
    """Factory for creating filter components.

    This factory provides methods for creating filter chains from explicit
    filters and compiled filter engines from configuration.
    """

    @staticmethod
    def create_filter_chain(filters: List[FilterLike]) -> FilterChain:
        """Create a new filter chain with the provided filters.

        Args:
            filters: A list of filters to include in the chain. Filters will be
                    evaluated in the order they appear in the list.

        Returns:
            A FilterChain containing the provided filters.
        """
        return FilterChain(filters)

    @staticmethod
    def create_engine(settings: FilterSettings) -> MessageFilterEngine:
        """Compile filter settings into an engine, failing on invalid patterns.

        Args:
            settings: The filter settings to compile.

        Returns:
            A MessageFilterEngine with no compilation errors.

        Raises:
            FilterCompilationError: If any pattern or query failed to compile,
                listing all of them.
        """
        engine = MessageFilterEngine(settings)
        engine.raise_for_errors()
        return engine
