from rmq_dump.processing.processor import MessageProcessor, ProcessingResult, ProgressReporter

__all__ = [
    "MessageProcessor",
    "ProcessingResult",
    "ProgressReporter",
]
