from typing import List, Optional


class RmqDumpError(Exception):
    """Base exception for all rmq-dump related errors."""

    pass


class ConfigurationError(RmqDumpError):
    """Raised when there is an issue with configuration settings."""

    pass


class UnsupportedTypeError(ConfigurationError):
    """Raised when an unsupported type is requested from a factory."""

    pass


class FilterCompilationError(ConfigurationError):
    """
    Raised when one or more filter patterns could not be compiled.

    All failures are reported together, so the message carries every
    invalid pattern rather than only the first one.
    """

    def __init__(self, errors: List[str], message: Optional[str] = None):
        self.errors = list(errors)
        super().__init__(message or "Invalid filter configuration: " + "; ".join(self.errors))


class ConnectionError(RmqDumpError):
    """Raised when there is an issue connecting to the broker."""

    pass


class ConsumerError(RmqDumpError):
    """Raised when the consumer is used in an invalid way."""

    pass


class ExportError(RmqDumpError):
    """Raised when an exporter fails to open, write or close its output."""

    pass


class ProcessingError(RmqDumpError):
    """Raised when there is an issue with message processing."""

    pass


class SerializationError(RmqDumpError):
    """Raised when there is an issue with message serialization."""

    pass
