from typing import TextIO
from rmq_dump.config.loader import APPEND_MODE, OVERWRITE_MODE, VALID_FILE_MODES
from rmq_dump.exporters.base import Exporter
from rmq_dump.model.message import Envelope
from rmq_dump.utils.exceptions import ConfigurationError, ExportError
from rmq_dump.utils.logger import logger

_OPEN_MODES = {APPEND_MODE: "a", OVERWRITE_MODE: "w"}


class FileExporter(Exporter):
    """
    Writes serialized envelopes to a file, one record per line.

    The file is opened at construction, truncated in `overwrite` mode and
    preserved in `append` mode. Every write is flushed before returning so
    that an interrupted dump keeps everything written so far.
    """

    def __init__(
        self,
        output_file: str,
        file_mode: str = OVERWRITE_MODE,
        pretty_print: bool = False,
    ):
        """
        Open the output file.

        Args:
            output_file: Path of the file to write.
            file_mode: `append` or `overwrite`.
            pretty_print: Indent each record.

        Raises:
            ConfigurationError: If the path is empty or the mode is unknown.
            ExportError: If the file cannot be opened.
        """
        super().__init__(pretty_print=pretty_print)

        if not output_file:
            raise ConfigurationError("output file is required when using file writer")
        if file_mode not in VALID_FILE_MODES:
            raise ConfigurationError(
                f"invalid file mode: {file_mode} (use 'append' or 'overwrite')"
            )

        self.output_file = output_file
        self.file_mode = file_mode

        try:
            self._file: TextIO = open(output_file, _OPEN_MODES[file_mode], encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to open output file {output_file}: {e}")
            raise ExportError(f"failed to open/create output file: {e}") from e

        logger.info(f"Writing messages to {output_file} ({file_mode})")

    @property
    def closed(self) -> bool:
        return self._file.closed

    def write(self, envelope: Envelope) -> None:
        output = self.render(envelope)
        try:
            self._file.write(output)
        except (OSError, ValueError) as e:
            raise ExportError(f"failed to write to file: {e}") from e

        try:
            self._file.flush()
        except (OSError, ValueError) as e:
            raise ExportError(f"failed to flush file: {e}") from e

    def close(self) -> None:
        if self._file.closed:
            return
        try:
            self._file.flush()
            self._file.close()
        except OSError as e:
            raise ExportError(f"failed to close file: {e}") from e
