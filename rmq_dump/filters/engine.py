from threading import Lock
from typing import List
import re

from rmq_dump.config.loader import FilterSettings
from rmq_dump.filters.base import FilterChain, FilterLike
from rmq_dump.filters.patterns import (
    ExcludePatternFilter,
    IncludePatternFilter,
    RegexFilter,
    SizeFilter,
    compile_pattern,
)
from rmq_dump.filters.query import JqQueryFilter, compile_query
from rmq_dump.utils.exceptions import FilterCompilationError
from rmq_dump.utils.logger import logger


class MessageFilterEngine:
    """
    Compiles filter settings into a filter chain and evaluates message bodies.

    Construction never fails: every pattern that cannot be compiled is
    recorded in `compilation_errors` instead. Callers must check those errors
    (or call `raise_for_errors`) before trusting `accepts`.

    The chain is evaluated in this order, stopping at the first rejection:
    size limit, regex filter, include patterns, exclude patterns, jq query.
    """

    def __init__(self, settings: FilterSettings):
        self.settings = settings
        self._lock = Lock()
        self._errors: List[str] = []
        self._chain = FilterChain()
        self._compile()

    def _compile(self) -> None:
        with self._lock:
            errors: List[str] = []
            filters: List[FilterLike] = []

            if self.settings.max_message_size >= 0:
                filters.append(SizeFilter(self.settings.max_message_size))

            if self.settings.regex_filter:
                try:
                    filters.append(RegexFilter(compile_pattern(self.settings.regex_filter)))
                except re.error as e:
                    errors.append(f"invalid regex filter {self.settings.regex_filter!r}: {e}")

            include = []
            for pattern in self.settings.include_patterns:
                try:
                    include.append(compile_pattern(pattern))
                except re.error as e:
                    errors.append(f"invalid include pattern {pattern!r}: {e}")
            if include:
                filters.append(IncludePatternFilter(include))

            exclude = []
            for pattern in self.settings.exclude_patterns:
                try:
                    exclude.append(compile_pattern(pattern))
                except re.error as e:
                    errors.append(f"invalid exclude pattern {pattern!r}: {e}")
            if exclude:
                filters.append(ExcludePatternFilter(exclude))

            if self.settings.json_filter:
                try:
                    filters.append(JqQueryFilter(compile_query(self.settings.json_filter)))
                except ValueError as e:
                    errors.append(f"invalid JSON filter {self.settings.json_filter!r}: {e}")

            self._errors = errors
            self._chain = FilterChain(filters)

        for error in errors:
            logger.error(error)
        logger.debug(f"Compiled {len(self._chain)} message filters")

    @property
    def compilation_errors(self) -> List[str]:
        return list(self._errors)

    def raise_for_errors(self) -> None:
        """
        Raise a single error describing every pattern that failed to compile.

        Raises:
            FilterCompilationError: If any pattern failed to compile.
        """
        if self._errors:
            raise FilterCompilationError(self._errors)

    def accepts(self, body: bytes) -> bool:
        """Return True if the body passes every configured filter."""
        return self._chain.accepts(body)
