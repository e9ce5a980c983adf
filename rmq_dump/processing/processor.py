from dataclasses import dataclass
from typing import Iterable, Optional
from rmq_dump.config.loader import DumpConfig
from rmq_dump.consumers.base import Consumer, ConsumerStatus
from rmq_dump.exporters.base import Exporter
from rmq_dump.model.message import Envelope
from rmq_dump.utils.exceptions import ExportError, SerializationError
from rmq_dump.utils.logger import logger


@dataclass
class ProcessingResult:
    """Counters describing one processing run."""

    consumed: int = 0
    exported: int = 0
    filtered: int = 0
    failed_writes: int = 0
    completed: bool = False


class ProgressReporter:
    """Reports running progress and completion through the application logger."""

    def report(self, consumed: int, total: int) -> None:
        if total > 0:
            logger.info(f"Messages processed: {consumed}/{total}")
        else:
            logger.info(f"Messages processed: {consumed}")

    def complete(self, result: ProcessingResult) -> None:
        logger.info(
            f"Message processing complete: {result.exported} exported, "
            f"{result.filtered} filtered, {result.failed_writes} failed"
        )


class MessageProcessor:
    """
    Bridges consumer statuses to the exporter.

    Every status carrying a delivery is converted to an envelope and written.
    A failed write is logged and counted and processing continues. A status
    with `complete` set ends processing.
    """

    def __init__(
        self,
        config: DumpConfig,
        consumer: Consumer,
        exporter: Exporter,
        progress: Optional[ProgressReporter] = None,
    ) -> None:
        """
        Initialize the MessageProcessor.

        Args:
            config: The invocation configuration
            consumer: Source of consumer statuses
            exporter: Destination for surviving messages
            progress: Progress reporter, a logging one by default
        """
        self.config = config
        self.consumer = consumer
        self.exporter = exporter
        self.progress = progress or ProgressReporter()
        self.running = True

    def dump(self) -> ProcessingResult:
        """
        Export the backlog of the configured queue.

        With `stop_after_consume`, an empty queue returns at once without
        consuming anything.
        """
        try:
            if self.config.stop_after_consume:
                if self.consumer.total_messages == 0:
                    logger.info("No messages to consume. Exiting.")
                    return ProcessingResult(completed=True)
                logger.info("Stopping after consuming all messages")

            statuses = self.consumer.consume()
            logger.info("Waiting for messages. To exit press CTRL+C")
            return self.process(statuses)
        finally:
            self._close_exporter()

    def monitor(self) -> ProcessingResult:
        """Export messages from a temporary queue until the stream ends."""
        try:
            statuses = self.consumer.consume()
            logger.info("Monitoring messages. To exit press CTRL+C")
            return self.process(statuses)
        finally:
            self._close_exporter()

    def process(self, statuses: Iterable[ConsumerStatus]) -> ProcessingResult:
        """
        Write every surviving delivery from a status stream.

        Args:
            statuses: The statuses to process, in receipt order.

        Returns:
            ProcessingResult: Counters for the processed statuses.
        """
        result = ProcessingResult()

        for status in statuses:
            result.consumed = status.consumed_messages
            result.filtered = status.filtered_messages

            # statuses without a delivery were filtered out
            if status.delivery is not None:
                self._export(status, result)

            if status.complete:
                result.completed = True
                self.progress.complete(result)
                break

            if not self.running:
                logger.info("Processing stopped")
                break

        return result

    def _export(self, status: ConsumerStatus, result: ProcessingResult) -> None:
        try:
            self.exporter.write(Envelope.from_delivery(status.delivery))
        except (ExportError, SerializationError) as e:
            result.failed_writes += 1
            logger.error(f"Failed to write message: {e}")
            return

        result.exported += 1
        self.progress.report(status.consumed_messages, status.total_messages)

    def _close_exporter(self) -> None:
        try:
            self.exporter.close()
        except ExportError as e:
            logger.error(f"Error closing exporter: {e}")

    def stop(self) -> None:
        """
        Stop processing.

        Closes the consumer so that a processor waiting for the next status
        wakes up as well.
        """
        if not self.running:
            logger.debug("Stop already in progress, ignoring duplicate call")
            return

        logger.info("Stop signal received")
        self.running = False
        self.consumer.close()
