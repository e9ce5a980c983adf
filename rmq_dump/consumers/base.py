from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional
import queue
import threading

from rmq_dump.model.message import Delivery


@dataclass(frozen=True)
class ConsumerStatus:
    """
    Progress emitted by a consumer for one delivery, or once on completion.

    `delivery` is None when the delivery was filtered out, and on the final
    status that has `complete` set.
    """

    total_messages: int
    consumed_messages: int
    filtered_messages: int
    complete: bool = False
    delivery: Optional[Delivery] = None


class StatusStream:
    """
    Single-producer, single-consumer handoff of consumer statuses.

    `publish` returns only once the reader has taken the status, so the
    producer never runs more than one status ahead of the reader. Both sides
    wake up periodically so that cancellation and closing are noticed.
    """

    def __init__(self, poll_interval: float = 0.2):
        self._slot: "queue.Queue[ConsumerStatus]" = queue.Queue(maxsize=1)
        self._taken = threading.Event()
        self._closed = threading.Event()
        self._poll_interval = poll_interval

    def publish(self, status: ConsumerStatus, cancelled: threading.Event) -> bool:
        """
        Hand a status to the reader, blocking until it has been taken.

        Args:
            status: The status to hand over.
            cancelled: Set by the owner to abandon the handoff.

        Returns:
            bool: False if the handoff was abandoned or the stream is closed.
        """
        if self._closed.is_set():
            return False

        self._taken.clear()
        while True:
            if cancelled.is_set():
                return False
            try:
                self._slot.put(status, timeout=self._poll_interval)
                break
            except queue.Full:
                continue

        while not self._taken.wait(self._poll_interval):
            if cancelled.is_set():
                return False
        return True

    def close(self) -> None:
        """Mark the end of the stream. Statuses already handed over are still read."""
        self._closed.set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def __iter__(self) -> Iterator[ConsumerStatus]:
        while True:
            try:
                status = self._slot.get(timeout=self._poll_interval)
            except queue.Empty:
                if self._closed.is_set():
                    return
                continue
            self._taken.set()
            yield status


class Consumer(ABC):
    """
    Base abstract class for message consumers.

    A consumer owns its broker connection and produces a stream of
    ConsumerStatus values, one per received delivery.
    """

    @property
    @abstractmethod
    def total_messages(self) -> int:
        """Messages known to be queued when consumption started, 0 if unknown."""
        pass

    @abstractmethod
    def consume(self) -> StatusStream:
        """
        Start consuming and return the stream of statuses.

        Raises:
            ConsumerError: If consumption was already started.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Stop consuming and release the broker connection. Safe to call twice."""
        pass
