from typing import Optional, TextIO
import sys
from rmq_dump.exporters.base import Exporter
from rmq_dump.model.message import Envelope
from rmq_dump.utils.exceptions import ExportError


class ConsoleExporter(Exporter):
    """Writes serialized envelopes to standard output."""

    def __init__(self, pretty_print: bool = False, stream: Optional[TextIO] = None):
        super().__init__(pretty_print=pretty_print)
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # resolved on use so that a replaced sys.stdout is honoured
        return self._stream if self._stream is not None else sys.stdout

    def write(self, envelope: Envelope) -> None:
        output = self.render(envelope)
        try:
            self.stream.write(output)
            self.stream.flush()
        except (OSError, ValueError) as e:
            raise ExportError(f"failed to write to console: {e}") from e

    def close(self) -> None:
        pass
