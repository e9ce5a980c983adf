from typing import Iterable, Pattern, Tuple
import re

from rmq_dump.filters.base import MessageFilter


class SizeFilter(MessageFilter):
    """Rejects bodies longer than a maximum number of bytes.

    A negative maximum means there is no limit.
    """

    def __init__(self, max_size: int):
        self.max_size = max_size

    def accepts(self, body: bytes) -> bool:
        if self.max_size < 0:
            return True
        return len(body) <= self.max_size


class RegexFilter(MessageFilter):
    """Accepts only bodies in which the regular expression matches."""

    def __init__(self, pattern: Pattern[str]):
        self.pattern = pattern

    def accepts(self, body: bytes) -> bool:
        return self.pattern.search(self.decode(body)) is not None


class IncludePatternFilter(MessageFilter):
    """Accepts bodies matching at least one of the include patterns.

    An empty pattern set accepts everything.
    """

    def __init__(self, patterns: Iterable[Pattern[str]]):
        self.patterns: Tuple[Pattern[str], ...] = tuple(patterns)

    def accepts(self, body: bytes) -> bool:
        if not self.patterns:
            return True
        text = self.decode(body)
        return any(pattern.search(text) for pattern in self.patterns)


class ExcludePatternFilter(MessageFilter):
    """Rejects bodies matching any of the exclude patterns."""

    def __init__(self, patterns: Iterable[Pattern[str]]):
        self.patterns: Tuple[Pattern[str], ...] = tuple(patterns)

    def accepts(self, body: bytes) -> bool:
        text = self.decode(body)
        return not any(pattern.search(text) for pattern in self.patterns)


def compile_pattern(pattern: str) -> Pattern[str]:
    """Compile a filter pattern, raising re.error if it is invalid."""
    return re.compile(pattern)
