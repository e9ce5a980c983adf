from abc import ABC, abstractmethod
from rmq_dump.model.message import Envelope
from rmq_dump.utils.serializer import Serializer


class Exporter(ABC):
    """
    Base abstract class for all exporter implementations.

    Exporters turn envelopes into their serialized JSON form and persist or
    display them. Each exporter owns its output resource and releases it in
    `close`.
    """

    def __init__(self, pretty_print: bool = False):
        self.pretty_print = pretty_print
        self.serializer = Serializer()

    def render(self, envelope: Envelope) -> str:
        """
        Serialize an envelope into one newline-terminated record.

        Raises:
            SerializationError: If the envelope cannot be serialized.
        """
        return self.serializer.serialize(envelope, pretty=self.pretty_print) + "\n"

    @abstractmethod
    def write(self, envelope: Envelope) -> None:
        """
        Write one envelope to the exporter's output.

        Args:
            envelope (Envelope): The envelope to write.

        Raises:
            ExportError: If the write fails.
            SerializationError: If the envelope cannot be serialized.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Close any open resources.

        Raises:
            ExportError: If flushing or closing the output fails.
        """
        pass
